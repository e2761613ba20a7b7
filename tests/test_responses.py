"""
Tests for spoken response generation.
"""
import pytest

from voice_order.models import Order, OrderItem, Product
from voice_order.nlu import responses
from voice_order.nlu.classifier import interpret
from voice_order.nlu.constants import Locale
from voice_order.schemas.commands import QuantityKind, QuantitySlot


def _order() -> Order:
    product = Product(
        name="Basmati Rice",
        unit="kg",
        price=120.0,
        alternative_names=[{"language": "hindi", "dialect": "standard", "name": "चावल"}],
        voice_patterns=[],
    )
    order = Order(id=7, user_id="user-1", total_amount=240.0)
    order.items.append(OrderItem(
        product=product,
        product_name="Basmati Rice",
        quantity=2.0,
        unit="kg",
        price=120.0,
        line_total=240.0,
    ))
    return order


class TestGenerateResponse:
    def test_order_read_back(self):
        command = interpret("order 2 kg of rice delivered to 12 MG Road by tomorrow evening pay by cash")

        assert responses.generate_response(command) == (
            "I understood you want to order 2 kg of rice delivered to 12 MG Road "
            "by tomorrow evening paid by cash on delivery. Is that correct?"
        )

    def test_product_asks_for_quantity(self):
        assert responses.generate_response(interpret("buy rice")) == "How much rice would you like?"

    def test_repeat_reads_previous_command(self):
        reply = responses.generate_response(interpret("repeat"), previous_command="order rice")
        assert reply == "I heard: order rice"

    def test_confirmation_replies(self):
        assert responses.generate_response(interpret("yes")) == "Great! I'll proceed with your order."
        assert responses.generate_response(interpret("maybe")).startswith("Would you like me to explain")

    def test_unknown(self):
        reply = responses.generate_response(interpret("hello there"))
        assert reply == "I didn't quite understand that. Could you please try again?"

    def test_hindi_template(self):
        command = interpret("madad", Locale("hindi"))
        reply = responses.generate_response(command, "hindi")
        assert reply.startswith("मैं आपका ऑर्डर")


class TestTemplateFallback:
    def test_colloquial_override(self):
        assert responses.get_template("yes", "english", "colloquial") == "Super! Going ahead with your order."

    def test_colloquial_falls_back_to_standard(self):
        assert responses.get_template("help", "english", "colloquial") == responses.get_template("help")

    def test_missing_language_falls_back_to_english(self):
        assert responses.get_template("unknown", "tamil") == responses.get_template("unknown", "english")

    def test_missing_key_in_language_falls_back_to_english(self):
        assert responses.get_template("product", "hindi") == "How much {product} would you like?"

    def test_unknown_key_raises(self):
        with pytest.raises(KeyError):
            responses.get_template("no_such_template")


class TestQuantityDescription:
    def test_range(self):
        quantity = QuantitySlot(kind=QuantityKind.RANGE, min=2, max=3, unit="kg")
        assert responses.describe_quantity(quantity) == "2 to 3 kg"

    def test_approximate(self):
        quantity = QuantitySlot(kind=QuantityKind.APPROXIMATE, value=1.5, unit="l")
        assert responses.describe_quantity(quantity) == "about 1.5 l"


class TestOrderResponses:
    def test_confirmation_prompt(self):
        assert responses.confirmation_prompt(_order()) == (
            "Please confirm your order: 2 kg of Basmati Rice at ₹120.00 per kg. "
            "Total amount: ₹240.00. Say yes to confirm or no to cancel."
        )

    def test_confirmation_prompt_uses_voice_name(self):
        prompt = responses.confirmation_prompt(_order(), "hindi")
        assert "चावल" in prompt
        assert "₹240.00" in prompt

    def test_confirmed_response_has_order_number(self):
        assert "order number is 7" in responses.confirmed_response(_order())

    def test_sync_message(self):
        assert responses.sync_message(1) == "1 orders synced successfully"


class TestProductVoiceHelpers:
    def test_voice_unit_singular_and_plural(self, fake_catalog):
        rice = fake_catalog.products[0]
        assert rice.get_voice_unit("english", "colloquial", 1) == "kilo"
        assert rice.get_voice_unit("english", "colloquial", 2) == "kilos"

    def test_voice_unit_falls_back_to_catalog_unit(self, fake_catalog):
        assert fake_catalog.products[0].get_voice_unit("tamil") == "kg"

    def test_voice_name_falls_back_to_primary_name(self, fake_catalog):
        assert fake_catalog.products[0].get_voice_name("tamil") == "Basmati Rice"

    def test_prompt_uses_localized_unit(self, fake_catalog):
        rice = fake_catalog.products[0]
        order = Order(id=8, user_id="user-1", total_amount=240.0)
        order.items.append(OrderItem(
            product=rice, product_name=rice.name, quantity=2.0, unit="kg", price=120.0, line_total=240.0,
        ))
        assert responses.confirmation_prompt(order, "english", "colloquial").startswith(
            "Please confirm your order: 2 kilos of Basmati Rice at ₹120.00 per kilo."
        )
