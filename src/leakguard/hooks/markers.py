"""
Scanner marker and invocation block.

The marker string is the one thing both detection and injection agree on:
a hook file "references the scanner" when it contains the marker, and the
block written into hook files always contains it.
"""

import re
from pathlib import Path

DEFAULT_MARKER = "gitleaks"

BLOCK_HEADER = "# Secret scanning (managed by leakguard)"

# Sourcing line of older Husky layouts, e.g. `. "$(dirname -- "$0")/_/husky.sh"`
BOOTSTRAP_LINE = re.compile(r"^\s*(\.|source)\s+.*husky\.sh")

_BLOCK_TEMPLATE = """{header}
# Husky runs hooks from a non-login shell, add the usual install locations
export PATH="/usr/local/bin:/opt/homebrew/bin:$HOME/.local/bin:$PATH"

if command -v {scanner} >/dev/null 2>&1; then
  echo "Scanning staged changes for secrets with {scanner}..."
  SCANNER_CONFIG="{config_path}"
  if [ -f "$SCANNER_CONFIG" ]; then
    {scanner} protect --staged --redact --verbose --config="$SCANNER_CONFIG" || exit 1
  else
    {scanner} protect --staged --redact --verbose || exit 1
  fi
  echo "No secrets detected"
else
  echo "Warning: {scanner} not found, skipping secret scan"
fi
"""


def has_scanner_invocation(text: str, marker: str = DEFAULT_MARKER) -> bool:
    """Return True if hook text already references the scanner."""
    return marker in text


def file_has_scanner_invocation(path: Path, marker: str = DEFAULT_MARKER) -> bool:
    """Like has_scanner_invocation, for a file on disk. Missing files never match."""
    try:
        return has_scanner_invocation(path.read_text(encoding="utf-8", errors="replace"), marker)
    except FileNotFoundError:
        return False


def render_scanner_block(scanner: str = DEFAULT_MARKER, config_path: str | None = None) -> str:
    """
    Render the shell snippet that runs the scanner on staged changes.

    Args:
        scanner: Scanner binary name (must contain the marker)
        config_path: Config path as seen by the shell at commit time

    Returns:
        Block text ending with a newline
    """
    if config_path is None:
        config_path = f"$HOME/.config/{scanner}/{scanner}.toml"
    return _BLOCK_TEMPLATE.format(header=BLOCK_HEADER, scanner=scanner, config_path=config_path)


def shell_config_path(path: Path) -> str:
    """Express a config path with $HOME so hook files stay portable across users."""
    home = Path.home()
    try:
        return "$HOME/" + path.relative_to(home).as_posix()
    except ValueError:
        return path.as_posix()


def inject_block(text: str, block: str) -> tuple[str, int | None]:
    """
    Insert the scanner block into existing hook text without losing content.

    The block goes immediately after the first hook-manager bootstrap line;
    if there is none it is appended at the end. Existing lines are kept
    verbatim and in order.

    Returns:
        (new_text, line number after which the block was inserted, or None
        when appended)
    """
    lines = text.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if BOOTSTRAP_LINE.match(line):
            head = "".join(lines[: index + 1])
            if not head.endswith("\n"):
                head += "\n"
            tail = "".join(lines[index + 1 :])
            return head + "\n" + block + tail, index + 1

    if text and not text.endswith("\n"):
        text += "\n"
    separator = "\n" if text else ""
    return text + separator + block, None
