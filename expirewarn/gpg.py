import logging
import subprocess
from typing import Callable, Iterable, List, Optional, Sequence

from .common import ExpireWarnError, KeyId
from .settings import Settings

log = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess"]

LIST_ARGS = ("--with-colons", "--fixed-list-mode", "--list-keys")


class GpgError(ExpireWarnError):
    pass


class OutputEncodingError(GpgError):
    pass


class Gpg:
    """Thin wrapper around the gpg binary. Every call blocks until gpg exits."""

    def __init__(self, binary: str = "gpg", homedir: Optional[str] = None, run: Runner | None = None) -> None:
        self.binary = binary
        self.homedir = homedir
        self._run = run or subprocess.run

    @staticmethod
    def from_settings(settings: Settings) -> "Gpg":
        return Gpg(binary=settings.GPG_BINARY, homedir=settings.HOMEDIR)

    def argv(self, *args: str) -> List[str]:
        cmd = [self.binary]
        if self.homedir:
            cmd += ["--homedir", self.homedir]
        cmd.extend(args)
        return cmd

    def list_keys(self, keys: Iterable[KeyId] = ()) -> str:
        cmd = self.argv(*LIST_ARGS, *(str(k) for k in keys))
        log.debug("running %s", " ".join(cmd))
        try:
            proc = self._run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False)
        except OSError as e:
            raise GpgError(f"cannot run {self.binary}: {e}") from e
        if proc.returncode != 0:
            err = proc.stderr.decode("utf-8", "replace").strip() if proc.stderr else ""
            raise GpgError(f"{self.binary} --list-keys exited with status {proc.returncode}: {err}")
        try:
            return proc.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise OutputEncodingError(f"{self.binary} output is not valid UTF-8: {e}") from e

    def quick_set_expire(self, primary: KeyId, expire: str, subkeys: Sequence[KeyId] = ()) -> bool:
        # stdio is inherited so gpg can prompt for a passphrase
        cmd = self.argv("--quick-set-expire", str(primary), expire, *(str(k) for k in subkeys))
        log.debug("running %s", " ".join(cmd))
        try:
            proc = self._run(cmd, check=False)
        except OSError as e:
            raise GpgError(f"cannot run {self.binary}: {e}") from e
        return proc.returncode == 0
