import logging

from algosdk import transaction

from asset_staker.constants import *
from asset_staker.errors import AuthorizationError, InsufficientFundsError, InvalidParameterError, InvalidStateError
from asset_staker.events import (
    account_state_event, add_rewards_event, add_stake_event, bootstrap_event, claim_rewards_event,
    create_application_event, opt_in_event, program_state_event, remove_stake_event,
)
from asset_staker.utils import AccountState, ProgramState, calculate_rewards, get_pending_rewards


logger = logging.getLogger(__name__)


class AssetStaker:
    """
    Staking application bound to one app id on an AssetLedger.

    Every call runs in a new block at ledger.next_timestamp. The post-state is
    computed on copies and written back only after the accompanying and inner
    transfers went through, so a failed call changes nothing.
    """

    def __init__(self, ledger, app_id):
        if app_id not in ledger.apps:
            raise InvalidStateError(f"Application {app_id} does not exist.")
        self.ledger = ledger
        self.app_id = app_id
        self.application_address = ledger.apps[app_id]["address"]

    @classmethod
    def create_application(cls, ledger, creator, app_id=None):
        app_id = ledger.create_app(
            creator,
            app_id=app_id,
            local_ints=APP_LOCAL_INTS,
            local_bytes=APP_LOCAL_BYTES,
            global_ints=APP_GLOBAL_INTS,
            global_bytes=APP_GLOBAL_BYTES,
        )
        staker = cls(ledger, app_id)

        ledger.begin_block()
        logs = [create_application_event.encode([creator])]
        staker._commit(ProgramState(), {}, logs=logs)
        logger.info("created application %s for %s", app_id, creator)
        return staker

    @property
    def creator(self):
        return self.ledger.get_app_creator(self.app_id)

    def get_program_state(self) -> ProgramState:
        return ProgramState.from_globalstate(self.ledger.global_states[self.app_id])

    def is_opted_in(self, address):
        return address in self.ledger.local_states[self.app_id]

    def get_account_state(self, address) -> AccountState:
        if not self.is_opted_in(address):
            raise InvalidStateError(f"{address} is not opted in to application {self.app_id}.")
        return AccountState.from_localstate(self.ledger.local_states[self.app_id][address])

    def get_pending_rewards(self, address, timestamp=None) -> int:
        if timestamp is None:
            timestamp = self.ledger.next_timestamp
        if timestamp < self.ledger.latest_timestamp:
            raise InvalidParameterError(f"Timestamp {timestamp} is before the latest block {self.ledger.latest_timestamp}.")
        return get_pending_rewards(self.get_program_state(), self.get_account_state(address), timestamp)

    def opt_in(self, sender):
        self.ledger.begin_block()
        if self.is_opted_in(sender):
            raise InvalidStateError(f"{sender} is already opted in.")

        logs = [opt_in_event.encode([sender])]
        self._commit(self.get_program_state(), {sender: AccountState()}, logs=logs)
        logger.info("%s opted in to application %s", sender, self.app_id)

    def bootstrap(self, sender, seed, stake_asset_id: int, reward_asset_id: int, start: int, finish: int):
        """
        Set the staked and rewarded assets and the program window.

        The seed payment covers the application's opt-in to each distinct
        asset. The window is given explicitly and must lie in the future.
        """
        now = self.ledger.begin_block()
        self._verify_creator(sender)

        program = self.get_program_state()
        if program.stake_asset_id != 0 or program.reward_asset_id != 0:
            raise InvalidStateError("Application is already bootstrapped.")
        if stake_asset_id <= 0 or reward_asset_id <= 0:
            raise InvalidParameterError("Stake and reward assets must be set.")
        if not start < finish:
            raise InvalidParameterError(f"Start {start} must be before finish {finish}.")
        if not now < start:
            raise InvalidParameterError(f"Start {start} must be after the current time {now}.")
        self._check_uint64(finish, "finish")

        assets = [stake_asset_id] if stake_asset_id == reward_asset_id else [stake_asset_id, reward_asset_id]
        required_amount = BOOTSTRAP_BASE_AMOUNT + ASSET_OPT_IN_AMOUNT * len(assets)
        if not isinstance(seed, transaction.PaymentTxn):
            raise InvalidParameterError("Seed must be a payment transaction.")
        if seed.receiver != self.application_address:
            raise InvalidParameterError("Seed must be paid to the application address.")
        if seed.amt < required_amount:
            raise InvalidParameterError(f"Seed amount {seed.amt} is below the required {required_amount}.")

        inner_transfers = [
            dict(asset_id=asset_id, sender=self.application_address, receiver=self.application_address, amount=0)
            for asset_id in assets
        ]
        program.stake_asset_id = stake_asset_id
        program.reward_asset_id = reward_asset_id
        program.start_timestamp = start
        program.finish_timestamp = finish

        logs = [bootstrap_event.encode([stake_asset_id, reward_asset_id, start, finish])]
        self._commit(program, {}, transactions=[seed], inner_transfers=inner_transfers, logs=logs)
        logger.info("bootstrapped application %s, window [%s, %s)", self.app_id, start, finish)

    def add_rewards(self, sender, axfer, reward_rate: int) -> int:
        now = self.ledger.begin_block()
        self._verify_creator(sender)

        program = self.get_program_state()
        self._verify_bootstrapped(program)
        self._verify_asset_transfer(axfer, sender, program.reward_asset_id)
        if reward_rate <= 0:
            raise InvalidParameterError(f"Reward rate must be positive, got {reward_rate}.")
        self._check_uint64(reward_rate, "reward rate")

        accounts = {}
        if self.is_opted_in(sender):
            program, accounts[sender] = calculate_rewards(program, self.get_account_state(sender), now)

        # the new rate also prices every account's unsettled time
        program.total_rewards = self._check_uint64(program.total_rewards + axfer.amount, "total rewards")
        program.reward_rate = reward_rate

        logs = self._state_logs(program, accounts)
        logs.append(add_rewards_event.encode([axfer.amount, reward_rate, program.total_rewards]))
        self._commit(program, accounts, transactions=[axfer], logs=logs)
        logger.info("added %s rewards at rate %s, pool is %s", axfer.amount, reward_rate, program.total_rewards)
        return program.total_rewards

    def add_stake(self, sender, axfer) -> int:
        now = self.ledger.begin_block()
        program = self.get_program_state()
        self._verify_bootstrapped(program)
        account = self.get_account_state(sender)
        self._verify_asset_transfer(axfer, sender, program.stake_asset_id)

        program, account = calculate_rewards(program, account, now)

        amount = axfer.amount
        program.total_staked = self._check_uint64(program.total_staked + amount, "total staked")
        account.stake += amount

        logs = self._state_logs(program, {sender: account})
        logs.append(add_stake_event.encode([amount]))
        self._commit(program, {sender: account}, transactions=[axfer], logs=logs)
        logger.info("%s staked %s, stake is %s", sender, amount, account.stake)
        return account.stake

    def remove_stake(self, sender, asset_id: int, amount: int) -> int:
        now = self.ledger.begin_block()
        program = self.get_program_state()
        self._verify_bootstrapped(program)
        account = self.get_account_state(sender)

        if amount < 0:
            raise InvalidParameterError(f"Amount must not be negative, got {amount}.")
        if amount > account.stake:
            raise InsufficientFundsError(f"Cannot remove {amount}, stake is {account.stake}.")
        if asset_id != program.stake_asset_id:
            raise InvalidStateError(f"Asset {asset_id} is not the stake asset {program.stake_asset_id}.")

        program, account = calculate_rewards(program, account, now)

        inner_transfers = [
            dict(asset_id=asset_id, sender=self.application_address, receiver=sender, amount=amount),
        ]
        program.total_staked -= amount
        account.stake -= amount

        logs = self._state_logs(program, {sender: account})
        logs.append(remove_stake_event.encode([amount]))
        self._commit(program, {sender: account}, inner_transfers=inner_transfers, logs=logs)
        logger.info("%s removed %s stake, stake is %s", sender, amount, account.stake)
        return account.stake

    def claim_rewards(self, sender, asset_id: int) -> int:
        now = self.ledger.begin_block()
        program = self.get_program_state()
        self._verify_bootstrapped(program)
        account = self.get_account_state(sender)

        if asset_id != program.reward_asset_id:
            raise InvalidStateError(f"Asset {asset_id} is not the reward asset {program.reward_asset_id}.")

        program, account = calculate_rewards(program, account, now)

        amount = account.pending_rewards
        if amount <= 0:
            raise InsufficientFundsError("There are no pending rewards to claim.")

        inner_transfers = [
            dict(asset_id=asset_id, sender=self.application_address, receiver=sender, amount=amount),
        ]
        account.pending_rewards = 0

        logs = self._state_logs(program, {sender: account})
        logs.append(claim_rewards_event.encode([amount]))
        self._commit(program, {sender: account}, inner_transfers=inner_transfers, logs=logs)
        logger.info("%s claimed %s rewards", sender, amount)
        return amount

    def _verify_creator(self, sender):
        if sender != self.creator:
            raise AuthorizationError(f"{sender} is not the application creator.")

    def _verify_bootstrapped(self, program):
        if not program.is_bootstrapped:
            raise InvalidStateError("Application is not bootstrapped.")

    def _verify_asset_transfer(self, axfer, sender, asset_id):
        if not isinstance(axfer, transaction.AssetTransferTxn):
            raise InvalidParameterError("Expected an asset transfer transaction.")
        if axfer.sender != sender:
            raise InvalidParameterError("Asset transfer must be sent by the caller.")
        if axfer.receiver != self.application_address:
            raise InvalidParameterError("Asset transfer must be sent to the application address.")
        if axfer.index != asset_id:
            raise InvalidStateError(f"Asset {axfer.index} is not the expected asset {asset_id}.")
        if axfer.amount <= 0:
            raise InsufficientFundsError("Asset transfer amount must be positive.")

    @staticmethod
    def _check_uint64(value, name):
        if value > MAX_UINT64:
            raise InvalidParameterError(f"{name} overflows uint64.")
        return value

    @staticmethod
    def _state_logs(program, accounts):
        logs = [
            program_state_event.encode([
                program.reward_rate,
                program.total_rewards,
                program.total_staked,
                program.last_update_timestamp,
            ])
        ]
        for address, account in accounts.items():
            logs.append(account_state_event.encode([
                address,
                account.stake,
                account.pending_rewards,
                account.last_update_timestamp,
            ]))
        return logs

    def _commit(self, program, accounts, transactions=None, inner_transfers=None, logs=None):
        global_state = program.to_globalstate()
        self.ledger.validate_app_state(self.app_id, global_state)
        local_states = {address: account.to_localstate() for address, account in accounts.items()}
        for local_state in local_states.values():
            self.ledger.validate_app_state(self.app_id, local_state, scope="local")

        self.ledger.eval_transactions(transactions, inner_transfers=inner_transfers, logs=logs)
        self.ledger.global_states[self.app_id] = global_state
        self.ledger.local_states[self.app_id].update(local_states)
