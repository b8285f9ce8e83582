import logging
import time
from copy import deepcopy

from algosdk import transaction
from algosdk.logic import get_application_address

from asset_staker.constants import ALGO_ASSET_ID, MAX_UINT64, MIN_TXN_FEE
from asset_staker.errors import AssetTransferError, ClockError, InvalidStateError


logger = logging.getLogger(__name__)

GENESIS_ID = "asset-staker-v1"
GENESIS_HASH = "SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI="


def get_suggested_params():
    return transaction.SuggestedParams(
        fee=MIN_TXN_FEE,
        first=1,
        last=1000,
        gh=GENESIS_HASH,
        gen=GENESIS_ID,
        flat_fee=True,
    )


class AssetLedger:
    """
    In-memory stand-in for the chain the staker runs on.

    Holds account balances per asset (asset 0 is the native coin), created
    assets, application global and local state, and the block clock. A group
    of transfers is applied all at once or not at all.
    """

    def __init__(self, next_timestamp=None):
        self.balances = {}
        self.assets = {}
        self.apps = {}
        self.global_states = {}
        self.local_states = {}
        self.next_app_id = 1_000
        self.latest_timestamp = 0
        self.next_timestamp = next_timestamp if next_timestamp is not None else int(time.time())
        self.last_block = None

    def set_account_balance(self, address, balance, asset_id=ALGO_ASSET_ID):
        self.balances.setdefault(address, {})[asset_id] = balance

    def get_account_balance(self, address, asset_id=ALGO_ASSET_ID):
        return self.balances.get(address, {}).get(asset_id)

    def is_opted_in(self, address, asset_id):
        if asset_id == ALGO_ASSET_ID:
            return True
        return asset_id in self.balances.get(address, {})

    def create_asset(self, asset_id, params: dict):
        creator = params["creator"]
        self.assets[asset_id] = dict(params)
        self.set_account_balance(creator, params.get("total", 0), asset_id)
        return asset_id

    def create_app(self, creator, app_id=None, local_ints=0, local_bytes=0, global_ints=0, global_bytes=0):
        if app_id is None:
            app_id = self.next_app_id
        if app_id in self.apps:
            raise InvalidStateError(f"Application {app_id} already exists.")
        self.next_app_id = max(self.next_app_id, app_id) + 1

        self.apps[app_id] = {
            "creator": creator,
            "address": get_application_address(app_id),
            "local_ints": local_ints,
            "local_bytes": local_bytes,
            "global_ints": global_ints,
            "global_bytes": global_bytes,
        }
        self.global_states[app_id] = {}
        self.local_states[app_id] = {}
        return app_id

    def validate_app_state(self, app_id, state, scope="global"):
        """Check a state dict against the int and byte slots the app was created with."""
        app = self.apps[app_id]
        ints = sum(1 for value in state.values() if isinstance(value, int))
        byte_values = len(state) - ints
        if ints > app[f"{scope}_ints"] or byte_values > app[f"{scope}_bytes"]:
            raise InvalidStateError(
                f"Application {app_id} {scope} state needs {ints} ints and {byte_values} bytes, "
                f"schema allows {app[f'{scope}_ints']} and {app[f'{scope}_bytes']}."
            )

    def get_app_creator(self, app_id):
        return self.apps[app_id]["creator"]

    def begin_block(self):
        timestamp = self.next_timestamp
        if timestamp < self.latest_timestamp:
            raise ClockError(f"Block timestamp {timestamp} is before {self.latest_timestamp}.")
        self.latest_timestamp = timestamp
        self.last_block = {"timestamp": timestamp, "txns": [], "inner_transfers": [], "logs": []}
        return timestamp

    def eval_transactions(self, transactions, inner_transfers=None, logs=None):
        """
        Apply the outer transactions, then the application's inner transfers.

        Everything is checked against a scratch copy of the balances, the
        ledger only changes if every transfer succeeds.
        """
        transactions = transactions or []
        inner_transfers = inner_transfers or []

        balances = deepcopy(self.balances)
        for txn in transactions:
            self._apply_transaction(balances, txn)
        for transfer in inner_transfers:
            self._transfer(balances, transfer["asset_id"], transfer["sender"], transfer["receiver"], transfer["amount"])

        self.balances = balances
        if self.last_block is not None:
            self.last_block["txns"].extend(transactions)
            self.last_block["inner_transfers"].extend(inner_transfers)
            self.last_block["logs"].extend(logs or [])

    def transfer_asset(self, asset_id, sender, receiver, amount):
        self.eval_transactions([], inner_transfers=[
            dict(asset_id=asset_id, sender=sender, receiver=receiver, amount=amount),
        ])

    def _apply_transaction(self, balances, txn):
        if isinstance(txn, transaction.PaymentTxn):
            if txn.close_remainder_to:
                raise AssetTransferError("Close remainder is not supported.")
            self._transfer(balances, ALGO_ASSET_ID, txn.sender, txn.receiver, txn.amt)
        elif isinstance(txn, transaction.AssetTransferTxn):
            if txn.close_assets_to or txn.revocation_target:
                raise AssetTransferError("Asset close and clawback are not supported.")
            self._transfer(balances, txn.index, txn.sender, txn.receiver, txn.amount)
        else:
            raise AssetTransferError(f"Unsupported transaction type {type(txn).__name__}.")

    def _transfer(self, balances, asset_id, sender, receiver, amount):
        if asset_id != ALGO_ASSET_ID and asset_id not in self.assets:
            raise AssetTransferError(f"Asset {asset_id} does not exist.")

        sender_balances = balances.setdefault(sender, {})
        receiver_balances = balances.setdefault(receiver, {})

        # zero amount self transfer is an asset opt-in
        if asset_id != ALGO_ASSET_ID and sender == receiver and amount == 0:
            sender_balances.setdefault(asset_id, 0)
            logger.debug("%s opted in to asset %s", sender, asset_id)
            return

        if asset_id != ALGO_ASSET_ID and asset_id not in sender_balances:
            raise AssetTransferError(f"{sender} is not opted in to asset {asset_id}.")
        if asset_id != ALGO_ASSET_ID and asset_id not in receiver_balances:
            raise AssetTransferError(f"{receiver} is not opted in to asset {asset_id}.")

        sender_balance = sender_balances.get(asset_id, 0)
        if sender_balance < amount:
            raise AssetTransferError(f"{sender} balance {sender_balance} is below {amount} of asset {asset_id}.")

        sender_balances[asset_id] = sender_balance - amount
        receiver_balance = receiver_balances.get(asset_id, 0) + amount
        if receiver_balance > MAX_UINT64:
            raise AssetTransferError(f"{receiver} balance of asset {asset_id} overflows.")
        receiver_balances[asset_id] = receiver_balance

        logger.debug("transfer %s of asset %s from %s to %s", amount, asset_id, sender, receiver)
