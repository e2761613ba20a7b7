"""
Tests for dialogue context accumulation across turns.
"""
from voice_order.nlu.classifier import interpret
from voice_order.nlu.context import is_reset, merge
from voice_order.schemas.commands import (
    DialogueContext,
    PaymentSlot,
    ProductSlot,
    QuantitySlot,
)


def _full_context() -> DialogueContext:
    return DialogueContext(
        product=ProductSlot(name="rice"),
        quantity=QuantitySlot(value=2, unit="kg"),
        payment=PaymentSlot(method="upi"),
        previous_command="order 2 kg of rice pay by upi",
    )


class TestMerge:
    """Slots fill in; explicit replacements overwrite."""

    def test_merge_into_empty_context(self):
        command = interpret("buy rice")
        merged = merge(None, command)

        assert merged.product.name == "rice"
        assert merged.previous_command == "buy rice"

    def test_new_slots_are_added(self):
        first = merge(DialogueContext(), interpret("buy rice"))
        second = merge(first, interpret("2 kg deliver to 12 MG Road"))

        assert second.product.name == "rice"
        assert second.quantity.value == 2
        assert second.delivery.address == "12 MG Road"
        assert second.previous_command == "2 kg deliver to 12 MG Road"

    def test_explicit_slot_replaces_old_value(self):
        merged = merge(_full_context(), interpret("pay by card"))

        assert merged.payment.method == "card"
        assert merged.product.name == "rice"

    def test_merge_does_not_mutate_input(self):
        context = _full_context()
        merge(context, interpret("pay by card"))

        assert context.payment.method == "upi"

    def test_merge_is_idempotent(self):
        context = _full_context()
        command = interpret("order 1 kg of sugar deliver to 5 Park Street")

        once = merge(context, command)
        twice = merge(once, command)

        assert twice == once

    def test_delivery_turn_keeps_earlier_product(self):
        first = merge(None, interpret("order 2 kg of rice"))
        second = merge(first, interpret("deliver the order to 12 MG Road pay by cash"))

        assert second.product.name == "rice"
        assert second.quantity.value == 2
        assert second.delivery.address == "12 MG Road"
        assert second.payment.method == "cash_on_delivery"

    def test_unknown_turn_keeps_slots(self):
        merged = merge(_full_context(), interpret("hmm let me see"))

        assert merged.product.name == "rice"
        assert merged.previous_command == "hmm let me see"


class TestReset:
    """A no or cancel clears everything."""

    def test_no_resets_context(self):
        command = interpret("no")

        assert is_reset(command)
        assert merge(_full_context(), command).is_empty()

    def test_cancel_resets_context(self):
        assert merge(_full_context(), interpret("cancel")).is_empty()

    def test_hindi_no_resets_context(self):
        from voice_order.nlu.constants import Locale
        assert merge(_full_context(), interpret("nahi", Locale("hindi"))).is_empty()

    def test_yes_and_help_do_not_reset(self):
        assert not is_reset(interpret("yes"))
        assert not is_reset(interpret("help"))

    def test_maybe_does_not_reset(self):
        merged = merge(_full_context(), interpret("maybe"))

        assert merged.product.name == "rice"
        assert merged.previous_command == "maybe"
