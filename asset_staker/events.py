from algosdk import abi

from asset_staker.event import Event


create_application_event = Event(
    name="create_application",
    args=[
        abi.Argument(arg_type="address", name="creator_address"),
    ]
)


opt_in_event = Event(
    name="opt_in",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
    ]
)


program_state_event = Event(
    name="program_state",
    args=[
        abi.Argument(arg_type="uint64", name="reward_rate"),
        abi.Argument(arg_type="uint64", name="total_rewards"),
        abi.Argument(arg_type="uint64", name="total_staked"),
        abi.Argument(arg_type="uint64", name="last_update_timestamp"),
    ]
)


account_state_event = Event(
    name="account_state",
    args=[
        abi.Argument(arg_type="address", name="user_address"),
        abi.Argument(arg_type="uint64", name="stake"),
        abi.Argument(arg_type="uint64", name="pending_rewards"),
        abi.Argument(arg_type="uint64", name="last_update_timestamp"),
    ]
)


bootstrap_event = Event(
    name="bootstrap",
    args=[
        abi.Argument(arg_type="uint64", name="stake_asset_id"),
        abi.Argument(arg_type="uint64", name="reward_asset_id"),
        abi.Argument(arg_type="uint64", name="start_timestamp"),
        abi.Argument(arg_type="uint64", name="finish_timestamp"),
    ]
)


add_rewards_event = Event(
    name="add_rewards",
    args=[
        abi.Argument(arg_type="uint64", name="amount"),
        abi.Argument(arg_type="uint64", name="reward_rate"),
        abi.Argument(arg_type="uint64", name="total_rewards"),
    ]
)


add_stake_event = Event(
    name="add_stake",
    args=[
        abi.Argument(arg_type="uint64", name="amount"),
    ]
)


remove_stake_event = Event(
    name="remove_stake",
    args=[
        abi.Argument(arg_type="uint64", name="amount"),
    ]
)


claim_rewards_event = Event(
    name="claim_rewards",
    args=[
        abi.Argument(arg_type="uint64", name="amount"),
    ]
)


asset_staker_events = [
    create_application_event,
    opt_in_event,
    program_state_event,
    account_state_event,
    bootstrap_event,
    add_rewards_event,
    add_stake_event,
    remove_stake_event,
    claim_rewards_event,
]
