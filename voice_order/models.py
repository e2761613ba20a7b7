from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    """Catalog entry. Read-only for the ordering core."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    unit = Column(String, nullable=False, default="piece")  # kg/g/l/ml/piece/dozen/pack
    price = Column(Float, nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    merchant_id = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # [{"language": "hindi", "dialect": "standard", "name": "चावल"}, ...]
    alternative_names = Column(JSON, nullable=False, default=list)
    # [{"language": "hindi", "dialect": "colloquial", "patterns": ["chawal", ...]}, ...]
    voice_patterns = Column(JSON, nullable=False, default=list)
    # [{"language": "hindi", "dialect": "standard", "singular": "किलो", "plural": "किलो"}, ...]
    unit_names = Column(JSON, nullable=False, default=list)

    order_items = relationship("OrderItem", back_populates="product")

    def get_voice_name(self, language: str, dialect: str = "standard") -> str:
        """Localized product name, falling back to the primary name."""
        for alt in self.alternative_names or []:
            if alt.get("language") == language and alt.get("dialect", "standard") == dialect:
                return alt.get("name") or self.name
        return self.name

    def get_voice_unit(self, language: str, dialect: str = "standard", quantity: float = 1) -> str:
        """Localized unit name for `quantity`, falling back to the catalog unit."""
        for entry in self.unit_names or []:
            if entry.get("language") == language and entry.get("dialect", "standard") == dialect:
                key = "singular" if quantity == 1 else "plural"
                return entry.get(key) or self.unit
        return self.unit


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    merchant_id = Column(String, nullable=True, index=True)
    status = Column(String, nullable=False, default="pending", index=True)
    total_amount = Column(Float, nullable=False, default=0.0)

    # Voice order block
    original_command = Column(Text, nullable=True)
    language = Column(String, nullable=True)
    dialect = Column(String, nullable=True, default="standard")
    processed_command = Column(JSON, nullable=True)  # ProcessedCommand snapshot
    confirmation_required = Column(Boolean, nullable=False, default=True)
    confirmed = Column(Boolean, nullable=False, default=False)
    confirmation_command = Column(Text, nullable=True)
    confirmation_time = Column(DateTime(timezone=True), nullable=True)
    cancellation_command = Column(Text, nullable=True)

    # Offline block
    is_offline = Column(Boolean, nullable=False, default=False)
    synced = Column(Boolean, nullable=False, default=True)
    sync_time = Column(DateTime(timezone=True), nullable=True)
    device_id = Column(String, nullable=True, index=True)

    # Delivery
    delivery_address = Column(Text, nullable=True)
    delivery_time = Column(String, nullable=True)
    delivery_instructions = Column(Text, nullable=True)

    # Payment
    payment_method = Column(String, nullable=True)
    payment_split_count = Column(Integer, nullable=True)
    payment_status = Column(String, nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    timeline = relationship(
        "OrderTimelineEntry",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderTimelineEntry.id",
    )

    __table_args__ = (
        Index("ix_orders_user_status_created_at", "user_id", "status", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)

    product_name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    price = Column(Float, nullable=False)  # unit price snapshot
    line_total = Column(Float, nullable=False)

    # Utterance that produced this line
    voice_command = Column(Text, nullable=True)
    language = Column(String, nullable=True)
    dialect = Column(String, nullable=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class OrderTimelineEntry(Base):
    """Append-only status history. Written together with Order.status."""
    __tablename__ = "order_timeline"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    note = Column(Text, nullable=True)
    updated_by = Column(String, nullable=True)

    order = relationship("Order", back_populates="timeline")


class Notification(Base):
    """Notification kept for users who were not connected when it was sent."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)  # order_status / offline_sync / voice_interaction
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
