from algosdk import transaction

from asset_staker.constants import *
from asset_staker.ledger import get_suggested_params


class AssetStakerClient():
    def __init__(self, staker, user_address) -> None:
        self.staker = staker
        self.ledger = staker.ledger
        self.app_id = staker.app_id
        self.application_address = staker.application_address
        self.user_address = user_address

    def get_suggested_params(self):
        return get_suggested_params()

    def get_global(self, key, default=None):
        return self.ledger.global_states[self.app_id].get(key, default)

    def get_local(self, key, default=None, address=None):
        address = address or self.user_address
        local_state = self.ledger.local_states[self.app_id].get(address, {})
        return local_state.get(key, default)

    def get_stake_asset_id(self):
        return self.get_global(STAKE_ASSET_KEY, 0)

    def get_reward_asset_id(self):
        return self.get_global(REWARD_ASSET_KEY, 0)

    def get_pending_rewards(self, timestamp=None):
        return self.staker.get_pending_rewards(self.user_address, timestamp=timestamp)

    def get_bootstrap_amount(self, stake_asset_id, reward_asset_id):
        asset_count = 1 if stake_asset_id == reward_asset_id else 2
        return BOOTSTRAP_BASE_AMOUNT + ASSET_OPT_IN_AMOUNT * asset_count

    def get_optin_if_needed_txn(self, asset_id):
        if self.ledger.is_opted_in(self.user_address, asset_id):
            return None
        return transaction.AssetTransferTxn(
            index=asset_id,
            sender=self.user_address,
            receiver=self.user_address,
            sp=self.get_suggested_params(),
            amt=0,
        )

    def opt_in_asset(self, asset_id):
        txn = self.get_optin_if_needed_txn(asset_id)
        if txn is not None:
            self.ledger.eval_transactions([txn])

    def bootstrap(self, stake_asset_id: int, reward_asset_id: int, start: int, finish: int, seed_amount: int = None):
        if seed_amount is None:
            seed_amount = self.get_bootstrap_amount(stake_asset_id, reward_asset_id)

        seed = transaction.PaymentTxn(
            sender=self.user_address,
            sp=self.get_suggested_params(),
            receiver=self.application_address,
            amt=seed_amount,
        )
        return self.staker.bootstrap(self.user_address, seed, stake_asset_id, reward_asset_id, start, finish)

    def opt_in(self):
        return self.staker.opt_in(self.user_address)

    def add_rewards(self, amount: int, reward_rate: int):
        axfer = transaction.AssetTransferTxn(
            index=self.get_reward_asset_id(),
            sender=self.user_address,
            receiver=self.application_address,
            sp=self.get_suggested_params(),
            amt=amount,
        )
        return self.staker.add_rewards(self.user_address, axfer, reward_rate)

    def add_stake(self, amount: int):
        axfer = transaction.AssetTransferTxn(
            index=self.get_stake_asset_id(),
            sender=self.user_address,
            receiver=self.application_address,
            sp=self.get_suggested_params(),
            amt=amount,
        )
        return self.staker.add_stake(self.user_address, axfer)

    def remove_stake(self, amount: int, asset_id: int = None):
        if asset_id is None:
            asset_id = self.get_stake_asset_id()
        return self.staker.remove_stake(self.user_address, asset_id, amount)

    def claim_rewards(self, asset_id: int = None):
        if asset_id is None:
            asset_id = self.get_reward_asset_id()
        return self.staker.claim_rewards(self.user_address, asset_id)
