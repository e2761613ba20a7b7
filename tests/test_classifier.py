"""
Tests for intent classification and confidence scoring.
"""
from voice_order.nlu.classifier import interpret, is_actionable, score
from voice_order.nlu.constants import Locale
from voice_order.schemas.commands import (
    CommandType,
    ConfirmationType,
    DialogueContext,
    ExtractedSlots,
    GeneralType,
    PaymentSlot,
    ProductSlot,
    QuantitySlot,
    DeliverySlot,
)


FULL_ORDER = "order 2 kg of rice delivered to 12 MG Road by tomorrow evening pay by cash"


class TestOrderClassification:
    """Slot-scored commands."""

    def test_full_order_is_actionable(self):
        command = interpret(FULL_ORDER)

        assert command.type == CommandType.ORDER
        assert command.confidence == 1.0
        assert command.original_command == FULL_ORDER
        assert is_actionable(command)

    def test_partial_order_is_not_actionable(self):
        command = interpret("order 2 kg of rice")

        assert command.type == CommandType.ORDER
        assert command.confidence == 0.6
        assert not is_actionable(command)

    def test_bare_product_is_product_type(self):
        command = interpret("buy rice")

        assert command.type == CommandType.PRODUCT
        assert command.confidence == 0.3
        assert not is_actionable(command)

    def test_nothing_recognized_is_unknown(self):
        command = interpret("hello there")

        assert command.type == CommandType.UNKNOWN
        assert command.confidence == 0.0

    def test_single_payment_slot_is_order(self):
        command = interpret("pay by cash")

        assert command.type == CommandType.ORDER
        assert command.confidence == 0.2

    def test_threshold_is_read_from_config(self, monkeypatch):
        import voice_order.config as config_mod
        monkeypatch.setattr(config_mod, "ORDER_CONFIDENCE_THRESHOLD", 0.5)

        assert is_actionable(interpret("order 2 kg of rice"))


class TestConfidenceScore:
    """Confidence is additive per slot and capped."""

    def test_single_slot_scores(self):
        assert score(ExtractedSlots(product=ProductSlot(name="rice"))) == 0.3
        assert score(ExtractedSlots(quantity=QuantitySlot(value=1, unit="kg"))) == 0.3
        assert score(ExtractedSlots(delivery=DeliverySlot(address="x"))) == 0.2
        assert score(ExtractedSlots(payment=PaymentSlot(method="upi"))) == 0.2

    def test_all_slots_score_one(self):
        extracted = ExtractedSlots(
            product=ProductSlot(name="rice"),
            quantity=QuantitySlot(value=1, unit="kg"),
            delivery=DeliverySlot(address="x"),
            payment=PaymentSlot(method="upi"),
        )
        assert score(extracted) == 1.0

    def test_empty_scores_zero(self):
        assert score(ExtractedSlots()) == 0.0

    def test_monotonic_in_slot_count(self):
        one = score(ExtractedSlots(product=ProductSlot(name="rice")))
        two = score(ExtractedSlots(product=ProductSlot(name="rice"), payment=PaymentSlot(method="upi")))
        assert one < two <= 1.0


class TestWholeUtteranceCommands:
    """General and confirmation matches short-circuit scoring."""

    def test_yes_is_full_confidence_confirmation(self):
        command = interpret("yes")

        assert command.type == CommandType.CONFIRMATION
        assert command.confirmation_type == ConfirmationType.YES
        assert command.confidence == 1.0
        assert command.extracted.is_empty()

    def test_hindi_yes_uses_english_fallback(self):
        command = interpret("yes", Locale("hindi", "standard"))

        assert command.type == CommandType.CONFIRMATION
        assert command.confirmation_type == ConfirmationType.YES
        assert command.confidence == 1.0

    def test_language_without_lexicon_uses_english(self):
        command = interpret("no", Locale("bhojpuri", "standard"))

        assert command.confirmation_type == ConfirmationType.NO

    def test_general_help(self):
        command = interpret("help")

        assert command.type == CommandType.GENERAL
        assert command.general_type == GeneralType.HELP
        assert command.confidence == 1.0
        assert command.confirmation_type is None

    def test_general_wins_over_context(self):
        context = DialogueContext(previous_command="order rice")
        command = interpret("cancel", context=context)

        assert command.type == CommandType.GENERAL
        assert command.general_type == GeneralType.CANCEL


class TestClarification:
    """Low confidence mid-conversation asks again instead of guessing."""

    def test_low_confidence_with_history_is_clarification(self):
        context = DialogueContext(previous_command="order rice")
        command = interpret("2 kg", context=context)

        assert command.type == CommandType.CLARIFICATION
        assert command.confidence == 0.8
        assert command.extracted.quantity.value == 2

    def test_low_confidence_without_history_is_not_clarification(self):
        command = interpret("2 kg", context=DialogueContext())

        assert command.type == CommandType.ORDER
        assert command.confidence == 0.3

    def test_half_confidence_is_not_clarification(self):
        context = DialogueContext(previous_command="order rice")
        command = interpret("2 kg deliver to 12 MG Road", context=context)

        assert command.type == CommandType.ORDER
        assert command.confidence == 0.5

    def test_clarification_is_never_actionable(self):
        context = DialogueContext(previous_command="order rice")
        assert not is_actionable(interpret("2 kg", context=context))
