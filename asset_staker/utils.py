from dataclasses import dataclass, replace

from asset_staker.constants import *


@dataclass
class ProgramState:
    stake_asset_id: int = 0
    reward_asset_id: int = 0
    reward_rate: int = 0
    total_rewards: int = 0
    total_staked: int = 0
    start_timestamp: int = 0
    finish_timestamp: int = 0
    last_update_timestamp: int = 0

    @classmethod
    def from_globalstate(cls, global_state: dict):
        return cls(
            stake_asset_id=global_state.get(STAKE_ASSET_KEY, 0),
            reward_asset_id=global_state.get(REWARD_ASSET_KEY, 0),
            reward_rate=global_state.get(REWARD_RATE_KEY, 0),
            total_rewards=global_state.get(TOTAL_REWARDS_KEY, 0),
            total_staked=global_state.get(TOTAL_STAKED_KEY, 0),
            start_timestamp=global_state.get(START_TIMESTAMP_KEY, 0),
            finish_timestamp=global_state.get(FINISH_TIMESTAMP_KEY, 0),
            last_update_timestamp=global_state.get(LAST_UPDATED_KEY, 0),
        )

    def to_globalstate(self) -> dict:
        return {
            STAKE_ASSET_KEY: self.stake_asset_id,
            REWARD_ASSET_KEY: self.reward_asset_id,
            REWARD_RATE_KEY: self.reward_rate,
            TOTAL_REWARDS_KEY: self.total_rewards,
            TOTAL_STAKED_KEY: self.total_staked,
            START_TIMESTAMP_KEY: self.start_timestamp,
            FINISH_TIMESTAMP_KEY: self.finish_timestamp,
            LAST_UPDATED_KEY: self.last_update_timestamp,
        }

    @property
    def is_bootstrapped(self):
        return self.stake_asset_id != 0 and self.reward_asset_id != 0


@dataclass
class AccountState:
    stake: int = 0
    pending_rewards: int = 0
    last_update_timestamp: int = 0

    @classmethod
    def from_localstate(cls, local_state: dict):
        return cls(
            stake=local_state.get(USER_STAKE_KEY, 0),
            pending_rewards=local_state.get(USER_PENDING_REWARDS_KEY, 0),
            last_update_timestamp=local_state.get(USER_LAST_UPDATED_KEY, 0),
        )

    def to_localstate(self) -> dict:
        return {
            USER_STAKE_KEY: self.stake,
            USER_PENDING_REWARDS_KEY: self.pending_rewards,
            USER_LAST_UPDATED_KEY: self.last_update_timestamp,
        }


def get_rewards_per_token(program: ProgramState, account: AccountState, current_timestamp: int) -> int:
    """
    Reward earned per staked unit since the account was last settled.

    The rate is applied to the account's own stake, it is not divided by
    total_staked. Every staker earns the same amount per unit regardless of
    how many others are staking.
    """
    if program.total_staked == 0:
        return 0

    end = min(current_timestamp, program.finish_timestamp)
    start = max(account.last_update_timestamp, program.start_timestamp)

    duration = end - start
    return duration * program.reward_rate


def calculate_rewards(program: ProgramState, account: AccountState, current_timestamp: int):
    """
    Settle the reward an account earned since its last update.

    Returns new (program, account) states, the inputs are not modified. The
    amount credited is capped at total_rewards, so an exhausted pool silently
    under-pays instead of failing.
    """
    if current_timestamp < program.start_timestamp:
        return program, account

    if account.last_update_timestamp > program.finish_timestamp:
        return program, account

    rewards_per_token = get_rewards_per_token(program, account, current_timestamp)
    rewards_earned = account.stake * rewards_per_token
    rewards_earned = min(rewards_earned, program.total_rewards)

    account = replace(
        account,
        pending_rewards=account.pending_rewards + rewards_earned,
        last_update_timestamp=current_timestamp,
    )
    program = replace(
        program,
        total_rewards=program.total_rewards - rewards_earned,
        last_update_timestamp=current_timestamp,
    )
    return program, account


def get_pending_rewards(program: ProgramState, account: AccountState, current_timestamp: int) -> int:
    _, account = calculate_rewards(program, account, current_timestamp)
    return account.pending_rewards
