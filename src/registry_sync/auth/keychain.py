"""Access to the macOS keychain through the `security` tool."""

import asyncio
import re
import sys
from dataclasses import dataclass

from ..exceptions import PasswordNotFoundError, UnsupportedPlatformError

SECURITY_EXECUTABLE = "/usr/bin/security"
DOCKER_CREDENTIALS_LABEL = "Docker Credentials"

ACCOUNT_PATTERN = re.compile(r'"acct"<blob>="(.*)"')
HEX_PASSWORD_PATTERN = re.compile(r"0x([0-9a-fA-F]+)")
QUOTED_PASSWORD_PATTERN = re.compile(r'"(.*)"')


@dataclass(frozen=True)
class InternetPassword:
    """Account and password stored for an internet service."""

    account: str
    password: str


def parse_security_output(stdout: str, stderr: str) -> InternetPassword:
    """Parse the output of ``security find-internet-password -g``.

    The account is printed on stdout; the password line is printed on stderr.
    Passwords containing escaped or non-ASCII characters are also printed as
    hex (``password: 0x70617373  "pass"``), in which case the hex form is used.

    Raises:
        PasswordNotFoundError: If no password line is present
    """
    account_match = ACCOUNT_PATTERN.search(stdout)
    account = account_match.group(1) if account_match else ""

    password_line = next(
        (line for line in stderr.splitlines() if line.startswith("password")), ""
    )
    if not password_line:
        raise PasswordNotFoundError("Could not find password")

    hex_match = HEX_PASSWORD_PATTERN.search(password_line)
    if hex_match:
        password = bytes.fromhex(hex_match.group(1)).decode("utf-8")
    else:
        quoted_match = QUOTED_PASSWORD_PATTERN.search(password_line)
        if not quoted_match:
            raise PasswordNotFoundError("Could not find password")
        password = quoted_match.group(1)

    return InternetPassword(account=account, password=password)


async def find_internet_password(
    service: str, label: str = DOCKER_CREDENTIALS_LABEL
) -> InternetPassword:
    """Look up the internet password stored for a service.

    Args:
        service: Service name, e.g. "registry.docker.io"
        label: Keychain item label

    Returns:
        InternetPassword for the service

    Raises:
        UnsupportedPlatformError: If not running on macOS
        PasswordNotFoundError: If the keychain has no matching item
    """
    if sys.platform != "darwin":
        raise UnsupportedPlatformError(f"Expected darwin platform, got: {sys.platform}")

    try:
        process = await asyncio.create_subprocess_exec(
            SECURITY_EXECUTABLE,
            "find-internet-password",
            "-l",
            label,
            "-s",
            service,
            "-g",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise UnsupportedPlatformError(f"Keychain failed to start child process: {e}") from e

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise PasswordNotFoundError(f"Could not find password for {service}")

    return parse_security_output(
        stdout.decode("utf-8", errors="replace"), stderr.decode("utf-8", errors="replace")
    )
