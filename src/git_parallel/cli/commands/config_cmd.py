import click

from git_parallel.cli.ensure import Ensure
from git_parallel.cli.output import machine_output, user_output
from git_parallel.core.config_store import CONFIG_DESCRIPTIONS, ENV_OVERRIDES, config_keys
from git_parallel.core.context import AppContext


def _current_value(ctx: AppContext, key: str) -> str:
    return str(getattr(ctx.global_config, key))


@click.group("config")
def config_group() -> None:
    """Manage git-parallel configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: AppContext) -> None:
    """Print configuration keys and their effective values."""
    user_output(click.style(f"Configuration ({ctx.config_store.path()}):", bold=True))
    if not ctx.config_store.exists():
        user_output("  (no config file - showing defaults)")
    for key in config_keys():
        machine_output(f"{key}={_current_value(ctx, key)}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: AppContext, key: str) -> None:
    """Print the effective value of KEY."""
    Ensure.invariant(key in config_keys(), _invalid_key_message(key))
    machine_output(_current_value(ctx, key))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: AppContext, key: str, value: str) -> None:
    """Persist VALUE for KEY in the config file."""
    Ensure.invariant(key in config_keys(), _invalid_key_message(key))
    Ensure.invariant(value.strip() != "", f"Value for '{key}' cannot be empty.")

    ctx.config_store.set_value(key, value)
    user_output(f"Set {key}={value}")
    user_output(click.style(f"  {CONFIG_DESCRIPTIONS[key]}", dim=True))
    user_output(
        click.style(f"  ({ENV_OVERRIDES[key]} overrides this when set)", dim=True)
    )


def _invalid_key_message(key: str) -> str:
    return f"Invalid config key: {key}. Valid keys: {', '.join(config_keys())}"
