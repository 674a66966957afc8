"""Track the status prefixes (op, voice, ...) of nicks in each channel.

Log rows record the prefix a user held at the time of the event, so the
client keeps a per-channel roster fed from NAMES replies, MODE changes and
membership events.
"""

DEFAULT_PREFIX = "(qaohv)~&@%+"
DEFAULT_CHANMODES = "beI,k,l,imnpst"


def _key(nick: str) -> str:
    return nick.lower()


class ChannelRoster:
    def __init__(self):
        # channel key -> nick key -> set of status mode letters
        self._members: dict[str, dict[str, set[str]]] = {}
        self._mode_to_symbol: dict[str, str] = {}
        self._symbol_to_mode: dict[str, str] = {}
        self._rank: dict[str, int] = {}
        self._chanmodes: tuple[str, str, str, str] = ("", "", "", "")
        self.set_prefix_spec(DEFAULT_PREFIX)
        self.set_chanmodes(DEFAULT_CHANMODES)

    # ── Server capabilities (RPL_ISUPPORT) ────────────────────

    def set_prefix_spec(self, spec: str) -> None:
        """Apply a PREFIX= value such as ``(ov)@+``."""
        if not spec.startswith("(") or ")" not in spec:
            return
        modes, symbols = spec[1:].split(")", 1)
        if len(modes) != len(symbols):
            return
        self._mode_to_symbol = dict(zip(modes, symbols))
        self._symbol_to_mode = dict(zip(symbols, modes))
        self._rank = {m: i for i, m in enumerate(modes)}

    def set_chanmodes(self, spec: str) -> None:
        """Apply a CHANMODES= value such as ``beI,k,l,imnpst``."""
        groups = (spec.split(",") + ["", "", "", ""])[:4]
        self._chanmodes = tuple(groups)

    # ── Membership ────────────────────────────────────────────

    def names(self, channel: str, entries: list[str]) -> None:
        """Record members from a NAMES reply; entries carry their prefix symbols."""
        members = self._members.setdefault(_key(channel), {})
        for entry in entries:
            modes = set()
            i = 0
            while i < len(entry) and entry[i] in self._symbol_to_mode:
                modes.add(self._symbol_to_mode[entry[i]])
                i += 1
            nick = entry[i:].split("!", 1)[0]
            if nick:
                members[_key(nick)] = modes

    def join(self, channel: str, nick: str) -> None:
        self._members.setdefault(_key(channel), {})[_key(nick)] = set()

    def part(self, channel: str, nick: str) -> None:
        self._members.get(_key(channel), {}).pop(_key(nick), None)

    def kick(self, channel: str, nick: str) -> None:
        self.part(channel, nick)

    def quit(self, nick: str) -> None:
        """Remove `nick` from every channel."""
        for members in self._members.values():
            members.pop(_key(nick), None)

    def rename(self, old: str, new: str) -> None:
        for members in self._members.values():
            modes = members.pop(_key(old), None)
            if modes is not None:
                members[_key(new)] = modes

    def forget(self, channel: str) -> None:
        """Drop a channel entirely, when we leave it ourselves."""
        self._members.pop(_key(channel), None)

    # ── Modes ─────────────────────────────────────────────────

    def mode(self, channel: str, modestring: str, args: list[str]) -> None:
        """Apply a channel MODE change, updating status modes of members."""
        members = self._members.get(_key(channel))
        list_modes, key_modes, set_modes, _ = self._chanmodes
        args = list(args)
        adding = True
        for ch in modestring:
            if ch == "+":
                adding = True
                continue
            if ch == "-":
                adding = False
                continue
            if ch in self._mode_to_symbol:
                if not args:
                    break
                target = args.pop(0)
                if members is None:
                    continue
                modes = members.setdefault(_key(target), set())
                if adding:
                    modes.add(ch)
                else:
                    modes.discard(ch)
            elif ch in list_modes or ch in key_modes or (adding and ch in set_modes):
                if args:
                    args.pop(0)

    def prefix(self, channel: str, nick: str) -> str | None:
        """Return the nick's status symbols in `channel`, highest first, or None."""
        modes = self._members.get(_key(channel), {}).get(_key(nick))
        if not modes:
            return None
        ordered = sorted(modes, key=lambda m: self._rank.get(m, len(self._rank)))
        return "".join(self._mode_to_symbol.get(m, "") for m in ordered) or None
