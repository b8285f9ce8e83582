import unittest

from algosdk.account import generate_account

from asset_staker.client import AssetStakerClient
from asset_staker.constants import *
from asset_staker.ledger import AssetLedger
from asset_staker.staker import AssetStaker

from tests.constants import *


class BaseTestCase(unittest.TestCase):
    maxDiff = None

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.app_creator_sk, cls.app_creator_address = generate_account()
        cls.user_sk, cls.user_address = generate_account()
        cls.other_user_sk, cls.other_user_address = generate_account()

    def setUp(self):
        self.now = MAY_1
        self.ledger = AssetLedger(next_timestamp=self.now)
        self.ledger.set_account_balance(self.app_creator_address, 10_000_000)
        self.ledger.set_account_balance(self.user_address, 10_000_000)
        self.ledger.set_account_balance(self.other_user_address, 10_000_000)

        self.stake_asset_id = STAKE_ASSET_ID
        self.reward_asset_id = REWARD_ASSET_ID
        self.ledger.create_asset(self.stake_asset_id, dict(total=ASSET_TOTAL, decimals=6, name="Stake", unit_name="STK", creator=self.app_creator_address))
        self.ledger.create_asset(self.reward_asset_id, dict(total=ASSET_TOTAL, decimals=6, name="Reward", unit_name="RWD", creator=self.app_creator_address))

        for address in [self.user_address, self.other_user_address]:
            self.ledger.transfer_asset(self.stake_asset_id, address, address, 0)
            self.ledger.transfer_asset(self.reward_asset_id, address, address, 0)
            self.ledger.transfer_asset(self.stake_asset_id, self.app_creator_address, address, USER_STAKE_ASSET_BALANCE)

    def create_asset_staker_app(self):
        self.asset_staker = AssetStaker.create_application(self.ledger, self.app_creator_address, app_id=APP_ID)
        self.app_id = self.asset_staker.app_id
        self.application_address = self.asset_staker.application_address

        self.client_for_creator = AssetStakerClient(self.asset_staker, self.app_creator_address)
        self.asset_staker_client = AssetStakerClient(self.asset_staker, self.user_address)
        self.other_asset_staker_client = AssetStakerClient(self.asset_staker, self.other_user_address)

    def bootstrap_asset_staker_app(self, start=None, finish=None, same_asset=False):
        start = start or self.now + DAY
        finish = finish or start + WEEK
        reward_asset_id = self.stake_asset_id if same_asset else self.reward_asset_id

        self.start = start
        self.finish = finish
        self.client_for_creator.bootstrap(self.stake_asset_id, reward_asset_id, start, finish)

    def set_up_program(self, total_rewards=10_000, reward_rate=1, start=None, finish=None):
        self.create_asset_staker_app()
        self.bootstrap_asset_staker_app(start=start, finish=finish)
        if total_rewards:
            self.client_for_creator.add_rewards(total_rewards, reward_rate)

    def stake(self, client, amount, timestamp):
        self.ledger.next_timestamp = timestamp
        if not self.asset_staker.is_opted_in(client.user_address):
            client.opt_in()
        return client.add_stake(amount)

    def get_snapshot(self):
        return (
            dict(self.ledger.global_states[self.app_id]),
            {address: dict(state) for address, state in self.ledger.local_states[self.app_id].items()},
            {address: dict(balances) for address, balances in self.ledger.balances.items()},
        )
