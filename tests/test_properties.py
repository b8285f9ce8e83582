import hypothesis.strategies as st
from hypothesis import given, settings

from asset_staker.errors import AssetStakerError

from tests.constants import *
from tests.core import BaseTestCase


user_index = st.integers(min_value=0, max_value=1)

operations = st.one_of(
    st.tuples(st.just("advance"), st.integers(min_value=0, max_value=DAY)),
    st.tuples(st.just("add_stake"), user_index, st.integers(min_value=0, max_value=5_000)),
    st.tuples(st.just("remove_stake"), user_index, st.integers(min_value=0, max_value=5_000)),
    st.tuples(st.just("claim_rewards"), user_index),
    st.tuples(st.just("add_rewards"), st.integers(min_value=0, max_value=10**9), st.integers(min_value=0, max_value=100)),
)


class OperationSequenceTests(BaseTestCase):

    def build_program(self):
        self.setUp()
        self.create_asset_staker_app()
        self.bootstrap_asset_staker_app(start=self.now + 100, finish=self.now + 100 + 2 * DAY)
        self.client_for_creator.add_rewards(10**6, 1)

        self.clients = [self.asset_staker_client, self.other_asset_staker_client]
        for client in self.clients:
            client.opt_in()

    def get_state(self):
        program = self.asset_staker.get_program_state()
        accounts = [self.asset_staker.get_account_state(client.user_address) for client in self.clients]
        return program, accounts

    def apply(self, operation):
        name = operation[0]
        if name == "advance":
            self.ledger.next_timestamp += operation[1]
        elif name == "add_stake":
            self.clients[operation[1]].add_stake(operation[2])
        elif name == "remove_stake":
            self.clients[operation[1]].remove_stake(operation[2])
        elif name == "claim_rewards":
            self.clients[operation[1]].claim_rewards()
        elif name == "add_rewards":
            self.client_for_creator.add_rewards(operation[1], operation[2])

    @settings(max_examples=100, deadline=None)
    @given(st.lists(operations, max_size=40))
    def test_invariants_hold_for_every_operation(self, sequence):
        self.build_program()

        for operation in sequence:
            before, _ = self.get_state()
            snapshot = self.get_snapshot()
            try:
                self.apply(operation)
            except AssetStakerError:
                self.assertEqual(self.get_snapshot(), snapshot)
                continue

            program, accounts = self.get_state()

            self.assertEqual(program.total_staked, sum(account.stake for account in accounts))
            self.assertGreaterEqual(program.total_rewards, 0)
            if operation[0] != "add_rewards":
                self.assertLessEqual(program.total_rewards, before.total_rewards)

            app_address = self.application_address
            self.assertEqual(self.ledger.get_account_balance(app_address, self.stake_asset_id), program.total_staked)
            self.assertEqual(
                self.ledger.get_account_balance(app_address, self.reward_asset_id),
                program.total_rewards + sum(account.pending_rewards for account in accounts),
            )

    @settings(max_examples=50, deadline=None)
    @given(st.integers(min_value=1, max_value=5_000), st.integers(min_value=0, max_value=3 * DAY))
    def test_accrual_is_idempotent(self, amount, elapsed):
        self.build_program()
        self.ledger.next_timestamp = self.start
        self.asset_staker_client.add_stake(amount)

        self.ledger.next_timestamp = self.start + elapsed
        self.asset_staker_client.add_stake(1)
        settled = self.get_state()

        self.asset_staker_client.add_stake(1)
        program, accounts = self.get_state()
        self.assertEqual(accounts[0].pending_rewards, settled[1][0].pending_rewards)
        self.assertEqual(program.total_rewards, settled[0].total_rewards)
