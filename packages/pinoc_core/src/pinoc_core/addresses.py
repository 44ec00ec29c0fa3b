from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pinoc_core.console import Console
from pinoc_core.errors import MissingArtifactError, ToolInvocationError
from pinoc_core.tool_invoker import ToolInvoker

KEYGEN_TOOL = "solana-keygen"
ADDRESS_TOOL = "solana"


@dataclass(frozen=True)
class KeyPair:
    file_path: Path
    address: str


class AddressResolver:
    def __init__(
        self,
        invoker: ToolInvoker,
        console: Console | None = None,
        *,
        keygen_tool: str = KEYGEN_TOOL,
        address_tool: str = ADDRESS_TOOL,
    ) -> None:
        self.invoker = invoker
        self.console = console if console is not None else invoker.console
        self.keygen_tool = keygen_tool
        self.address_tool = address_tool

    def new_keypair(self, path: Path) -> KeyPair:
        self.invoker.run(
            self.keygen_tool,
            ["new", "--no-bip39-passphrase", "--silent", "--outfile", str(path)],
        )
        return KeyPair(file_path=path, address=self.address_of(path))

    def address_of(self, path: Path) -> str:
        if not path.is_file():
            raise MissingArtifactError(f"Keypair file not found: {path}")
        address = self.invoker.capture(self.address_tool, ["address", "-k", str(path)])
        if not address:
            raise ToolInvocationError(
                f"{self.address_tool} address returned no address for {path}",
                argv=[self.address_tool, "address", "-k", str(path)],
                returncode=0,
            )
        return address

    def default_address(self) -> str:
        """Address of the invoking user's default wallet, or "" if unavailable."""
        try:
            return self.invoker.capture(self.address_tool, ["address"])
        except ToolInvocationError as exc:
            self.console.warn(f"Failed to get default wallet address: {exc}")
            return ""
