"""
Tests for the balance engine.
"""
from lunch_tracker.settlements import Settlement
from lunch_tracker.splitter import compute_balances, split_evenly


class TestSplitEvenly:

    def test_remainder_goes_to_first_members(self):
        """100 across three members: the first member absorbs the extra unit."""
        assert split_evenly(100, ["a", "b", "c"]) == {"a": 34, "b": 33, "c": 33}

    def test_shares_sum_to_total(self):
        for total in (0, 1, 7, 40000, 100001):
            for size in (1, 2, 3, 7):
                members = [f"m{i}" for i in range(size)]
                assert sum(split_evenly(total, members).values()) == total

    def test_fewer_units_than_members(self):
        assert split_evenly(2, ["a", "b", "c"]) == {"a": 1, "b": 1, "c": 0}

    def test_no_members(self):
        assert split_evenly(100, []) == {}


class TestComputeBalances:

    def test_single_order(self, people, make_order):
        """Alice eats, Bob pays: Alice owes 40000, Bob is owed 40000."""
        balances = compute_balances(people, [make_order()], [])

        assert balances == {"P001": -40000, "P002": 40000, "P003": 0}

    def test_everyone_starts_at_zero(self, people):
        assert compute_balances(people, [], []) == {"P001": 0, "P002": 0, "P003": 0}

    def test_settled_amount_reduces_debt(self, people, make_order):
        balances = compute_balances(people, [make_order(settled_amount=15000)], [])

        assert balances["P001"] == -25000
        assert balances["P002"] == 25000

    def test_self_paid_order_nets_out(self, people, make_order):
        balances = compute_balances(people, [make_order(payer_id="P001")], [])

        assert balances["P001"] == 0

    def test_unallocated_settlement_reduces_debt(self, people, make_order):
        """A payment that was never allocated to orders counts directly."""
        settlement = Settlement("S001", "P001", "P002", 10000, "2024-05-02")

        balances = compute_balances(people, [make_order()], [settlement])

        assert balances["P001"] == -30000
        assert balances["P002"] == 30000

    def test_allocated_settlement_not_double_counted(self, people, make_order):
        """An allocated payment is already reflected in the order's settled amount."""
        order = make_order(settled_amount=40000)
        settlement = Settlement(
            "S001", "P001", "P002", 40000, "2024-05-02",
            allocations={"O001": 40000}
        )

        balances = compute_balances(people, [order], [settlement])

        assert balances == {"P001": 0, "P002": 0, "P003": 0}

    def test_zero_sum_for_individual_orders_and_settlements(self, people, make_order):
        orders = [
            make_order("O001", "P001", "P002", 40000, "2024-05-01"),
            make_order("O002", "P003", "P002", 45000, "2024-05-01"),
            make_order("O003", "P002", "P001", 35000, "2024-05-02", settled_amount=5000),
            make_order("O004", "P003", "P001", 52000, "2024-05-03"),
        ]
        settlements = [
            Settlement("S001", "P003", "P002", 20000, "2024-05-04"),
            Settlement("S002", "P001", "P003", 7000, "2024-05-04"),
            Settlement("S003", "P002", "P001", 35000, "2024-05-05", allocations={"O003": 30000}),
        ]

        balances = compute_balances(people, orders, settlements)

        assert sum(balances.values()) == 0

    def test_team_order_split(self, people, make_team_order):
        """100000 across three members, Bob pays and is also a member."""
        order = make_team_order(price=100000)

        balances = compute_balances(people, [order], [])

        assert balances["P001"] == -33334
        assert balances["P002"] == 100000 - 33333
        assert balances["P003"] == -33333
        assert sum(balances.values()) == 0

    def test_team_split_conservation(self, people, make_team_order):
        """Member debits add up to the price and the payer is credited the price."""
        order = make_team_order(members=["P001", "P003"], payer_id="P002", price=40001)

        balances = compute_balances(people, [order], [])

        assert balances["P001"] + balances["P003"] == -40001
        assert balances["P002"] == 40001

    def test_team_member_settlement_only_reduces_own_share(self, people, make_team_order):
        order = make_team_order(member_settled={"P001": 30000})

        balances = compute_balances(people, [order], [])

        assert balances["P001"] == 0
        assert balances["P003"] == -30000
        assert balances["P002"] == 90000 - 30000 - 30000

    def test_dangling_reference_does_not_raise(self, people, make_order):
        """Orders for deleted people contribute to a key nobody displays."""
        balances = compute_balances(people, [make_order(person_id="P999")], [])

        assert balances["P999"] == -40000
        assert balances["P002"] == 40000
        assert sum(balances.values()) == 0
