"""
Tests for the settlement allocator and settlement suggestions.
"""
from lunch_tracker.settlement import (
    allocate_settlement,
    apply_settlement,
    get_order_settlement_status,
    release_settlement,
    suggest_settlement_amount,
    suggest_settlements,
    unsettled_amount,
)
from lunch_tracker.settlements import Settlement, forget_orders


def _payment(amount, from_person_id="P001", to_person_id="P002"):
    return Settlement("S001", from_person_id, to_person_id, amount, "2024-06-01")


class TestApplySettlement:

    def test_oldest_order_settled_first(self, people, make_order):
        """A payment smaller than the oldest debt only touches the oldest order."""
        newer = make_order("O001", date="2024-05-02")
        older = make_order("O002", date="2024-05-01")

        updated, remaining = apply_settlement([newer, older], _payment(10000), people)

        assert remaining == 0
        assert updated[0].order_id == "O001"
        assert updated[0].settled_amount == 0
        assert updated[1].order_id == "O002"
        assert updated[1].settled_amount == 10000

    def test_full_discharge_then_overflow(self, people, make_order):
        orders = [
            make_order("O001", price=40000, date="2024-05-01"),
            make_order("O002", price=45000, date="2024-05-02", settled_amount=5000),
        ]

        updated, remaining = apply_settlement(orders, _payment(100000), people)

        assert [o.settled_amount for o in updated] == [40000, 45000]
        assert remaining == 100000 - (40000 + 40000)

    def test_partial_then_continues_on_next_order(self, people, make_order):
        orders = [
            make_order("O001", price=40000, date="2024-05-01"),
            make_order("O002", price=40000, date="2024-05-02"),
        ]

        updated, remaining = apply_settlement(orders, _payment(50000), people)

        assert updated[0].settled_amount == 40000
        assert updated[1].settled_amount == 10000
        assert remaining == 0

    def test_same_date_keeps_collection_order(self, people, make_order):
        orders = [
            make_order("O001", date="2024-05-01"),
            make_order("O002", date="2024-05-01"),
        ]

        updated, _ = apply_settlement(orders, _payment(40000), people)

        assert updated[0].settled_amount == 40000
        assert updated[1].settled_amount == 0

    def test_only_matching_direction_is_settled(self, people, make_order):
        """Orders by other people or paid by other people are untouched."""
        orders = [
            make_order("O001", person_id="P003", payer_id="P002"),
            make_order("O002", person_id="P001", payer_id="P003"),
            make_order("O003", person_id="P002", payer_id="P001"),
        ]

        updated, remaining = apply_settlement(orders, _payment(40000), people)

        assert [o.settled_amount for o in updated] == [0, 0, 0]
        assert remaining == 40000

    def test_input_orders_not_modified(self, people, make_order):
        order = make_order()

        updated, _ = apply_settlement([order], _payment(40000), people)

        assert order.settled_amount == 0
        assert updated[0] is not order

    def test_settled_amount_monotonic_and_bounded(self, people, make_order, make_team_order):
        orders = [
            make_order("O001", price=40000, date="2024-05-03", settled_amount=10000),
            make_order("O002", price=35000, date="2024-05-01"),
            make_team_order("O003", date="2024-05-02"),
            make_order("O004", person_id="P003", date="2024-05-01"),
        ]

        updated, _ = apply_settlement(orders, _payment(1000000), people)

        for before, after in zip(orders, updated):
            assert after.settled_amount >= before.settled_amount
            assert after.settled_amount <= after.price

    def test_team_order_settles_only_own_share(self, people, make_team_order):
        """Alice pays 50000 towards a 90000 bill split three ways."""
        order = make_team_order()

        updated, remaining = apply_settlement([order], _payment(50000), people)

        assert updated[0].member_settled == {"P001": 30000}
        assert updated[0].settled_amount == 30000
        assert updated[0].unsettled_for("P003") == 30000
        assert remaining == 20000

    def test_team_order_skipped_when_payer_differs(self, people, make_team_order):
        order = make_team_order(payer_id="P003")

        updated, remaining = apply_settlement([order], _payment(30000), people)

        assert updated[0].settled_amount == 0
        assert remaining == 30000


class TestAllocateAndRelease:

    def test_allocations_reported_per_order(self, make_order):
        orders = [
            make_order("O001", price=40000, date="2024-05-01"),
            make_order("O002", price=40000, date="2024-05-02"),
        ]

        _, allocations, remaining = allocate_settlement(orders, "P001", "P002", 50000)

        assert allocations == {"O001": 40000, "O002": 10000}
        assert remaining == 0

    def test_release_restores_orders(self, make_order, make_team_order):
        orders = [make_order("O001"), make_team_order("O002")]
        updated, allocations, _ = allocate_settlement(orders, "P001", "P002", 60000)
        settlement = Settlement("S001", "P001", "P002", 60000, "2024-06-01", allocations=allocations)

        restored = release_settlement(updated, settlement)

        assert [o.settled_amount for o in restored] == [0, 0]


def test_forget_orders_drops_only_deleted_orders():
    kept = Settlement("S001", "P001", "P002", 5000, "2024-06-01", allocations={"O001": 5000})
    paid = Settlement("S002", "P001", "P002", 9000, "2024-06-02",
                      allocations={"O001": 4000, "O002": 5000})

    updated = forget_orders([kept, paid], ["O002"])

    assert updated[0] is kept
    assert updated[1].allocations == {"O001": 4000}
    assert updated[1].unallocated_amount == 5000
    assert paid.allocations == {"O001": 4000, "O002": 5000}


class TestSettlementStatus:

    def test_unsettled(self, make_order):
        assert get_order_settlement_status(make_order()) == "unsettled"

    def test_partial(self, make_order):
        assert get_order_settlement_status(make_order(settled_amount=1)) == "partial"

    def test_settled(self, make_order):
        order = make_order(settled_amount=40000)

        assert get_order_settlement_status(order) == "settled"
        assert unsettled_amount(order) == 0

    def test_team_order_status(self, make_team_order):
        order = make_team_order(member_settled={"P001": 30000, "P002": 30000, "P003": 30000})

        assert get_order_settlement_status(order) == "settled"


class TestSuggestions:

    def test_suggest_amount_is_smaller_side(self):
        balances = {"P001": -40000, "P002": 30000}

        assert suggest_settlement_amount(balances, "P001", "P002") == 30000

    def test_suggest_amount_zero_when_direction_wrong(self):
        balances = {"P001": -40000, "P002": 30000}

        assert suggest_settlement_amount(balances, "P002", "P001") == 0
        assert suggest_settlement_amount(balances, "P001", "P999") == 0

    def test_suggest_settlements_clears_balances(self):
        balances = {"P001": -30000, "P002": 50000, "P003": -20000}

        payments = suggest_settlements(balances)

        assert payments == [
            {"from_person_id": "P001", "to_person_id": "P002", "amount": 30000},
            {"from_person_id": "P003", "to_person_id": "P002", "amount": 20000},
        ]

    def test_suggest_settlements_nothing_to_do(self):
        assert suggest_settlements({"P001": 0, "P002": 0}) == []
