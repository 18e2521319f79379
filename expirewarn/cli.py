import json
import logging
import tomllib
from typing import Optional, Tuple

import click

from .common import ExpireWarnError, InvalidIdentifier, KeyId, current_epoch
from .evaluate import select_expiring
from .extend import apply_extensions, plan_extensions
from .gpg import Gpg
from .inventory import parse_listing
from .logging_conf import setup_logging
from .settings import Settings
from .summary import expiry_report, extension_outcome

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_EXPIRING = 1
EXIT_FATAL = 2


class KeyIdType(click.ParamType):
    name = "KEYID"

    def convert(self, value, param, ctx):
        if isinstance(value, KeyId):
            return value
        try:
            return KeyId.parse(value)
        except InvalidIdentifier as e:
            self.fail(str(e), param, ctx)


def _make_gpg(binary: str, homedir: Optional[str]) -> Gpg:
    return Gpg(binary=binary, homedir=homedir)


@click.command()
@click.version_option(package_name="expirewarn")
@click.argument("keys", nargs=-1, type=KeyIdType())
@click.option("-d", "--days", "warn_days", type=int, default=None,
              help="Number of days before expiry to start warning.")
@click.option("--expire", default=None,
              help="Run gpg --quick-set-expire with this expiry for each key that expires soon.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="TOML file with warn_days, keys, expire, gpg, homedir, log_level.")
@click.option("--gpg", "gpg_binary", default=None, help="gpg executable to run.")
@click.option("--homedir", default=None, help="GnuPG home directory.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.pass_context
def main(
    ctx: click.Context,
    keys: Tuple[KeyId, ...],
    warn_days: Optional[int],
    expire: Optional[str],
    config_path: Optional[str],
    gpg_binary: Optional[str],
    homedir: Optional[str],
    as_json: bool,
) -> None:
    """Warn about GPG keys (KEYS are 40 uppercase hex character fingerprints) that expire soon.

    Exits 0 when nothing is flagged or every requested extension succeeded,
    1 when keys are flagged (or an extension failed), 2 on errors.
    """
    settings = Settings.from_env()
    if config_path:
        try:
            settings = settings.with_file(config_path)
        except tomllib.TOMLDecodeError as e:
            raise click.BadParameter(str(e), ctx=ctx, param_hint="--config") from e
    setup_logging(settings)

    if warn_days is None:
        warn_days = settings.WARN_DAYS
    expire = expire or settings.EXPIRE

    try:
        targets = list(keys) or [KeyId.parse(k) for k in settings.KEYS]
        if not targets:
            raise click.UsageError("no keys given", ctx=ctx)

        gpg = _make_gpg(gpg_binary or settings.GPG_BINARY, homedir or settings.HOMEDIR)
        inventory = parse_listing(gpg.list_keys(targets))
        now = current_epoch()
    except ExpireWarnError as e:
        log.error("%s", e)
        ctx.exit(EXIT_FATAL)

    expiring = select_expiring(inventory, targets, now, warn_days)
    log.info("%d of %d keys expire within %d days", len(expiring), len(targets), warn_days)

    report = expiry_report(inventory, targets, now, warn_days, expiring=expiring) if as_json else None
    if report is None and expiring:
        click.echo("The following GPG keys will expire soon:")
        for item in expiring:
            click.echo(f"{item.fingerprint}: {item.days} days")

    if not expiring or not expire:
        if report is not None:
            click.echo(json.dumps(report.model_dump(), indent=2))
        ctx.exit(EXIT_EXPIRING if expiring else EXIT_OK)

    # with --json, stdout carries only the report
    calls = plan_extensions(inventory, expiring, expire)
    try:
        result = apply_extensions(
            gpg,
            calls,
            announce=lambda c: click.echo(f"Setting expiry to {c.expire} for {c.describe()}", err=as_json),
        )
    except ExpireWarnError as e:
        log.error("%s", e)
        ctx.exit(EXIT_FATAL)

    if report is not None:
        report.extension = extension_outcome(result)
        click.echo(json.dumps(report.model_dump(), indent=2))
    if not result.ok:
        click.echo(f"Failed to update expiry of {result.failed.describe()}", err=True)
        ctx.exit(EXIT_EXPIRING)
    ctx.exit(EXIT_OK)


if __name__ == "__main__":
    main()
