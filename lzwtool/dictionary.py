"""
LZW dictionary (codebook) shared by the encoder and the decoder.

Both sides own a private Dictionary seeded from the same header and drive it
through the same three calls, in the same order:

    check_width()      before every codeword is written or read
    reference(code)    once per codeword written or read
    try_insert(...)    once per codeword except the last

so that after the Nth codeword both dictionaries are in the same state.

Patterns are stored as Pattern nodes: a pattern is its prefix pattern plus
one byte. Nodes are interned per dictionary, so one text has exactly one
node, and a new pattern costs O(1) no matter how long it is.
"""

from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .errors import ConfigError, InvalidCodeError
from .policies import Policy, make_tracker

MIN_WIDTH = 1
MAX_WIDTH = 31

# try_insert() outcomes
INSERTED = 'inserted'
EVICTED = 'evicted'
RESET = 'reset'
FROZEN = 'frozen'

_EVENT_OF = {INSERTED: "insert", EVICTED: "evict", RESET: "reset", FROZEN: "freeze"}


class Outcome(NamedTuple):
    kind: str
    code: Optional[int]   # slot that received the pattern, None when frozen


class Event(NamedTuple):
    """What the observer callback receives: 'insert', 'evict', 'reset', 'freeze' or 'widen'."""
    kind: str
    code: Optional[int]
    width: int
    next_code: int
    pattern: Optional[bytes]


class Pattern:
    """
    A dictionary pattern: 'prefix' plus the byte 'last'.

    The text never changes once built. 'code' and 'fanout' are bookkeeping
    for the owning Dictionary: the code currently mapped to this text (None
    if absent) and how many interned patterns extend this one.
    """
    __slots__ = ('prefix', 'last', 'first', 'length', 'code', 'fanout')

    def __init__(self, prefix: Optional['Pattern'], last: int) -> None:
        self.prefix = prefix
        self.last = last
        if prefix is None:
            self.first = last
            self.length = 1
        else:
            self.first = prefix.first
            self.length = prefix.length + 1
        self.code: Optional[int] = None
        self.fanout = 0

    def __len__(self) -> int:
        return self.length

    def __bytes__(self) -> bytes:
        out = bytearray(self.length)
        node = self
        i = self.length
        while node is not None:
            i -= 1
            out[i] = node.last
            node = node.prefix
        return bytes(out)

    def __repr__(self) -> str:
        return f"Pattern({bytes(self)!r}, code={self.code})"


def validate_params(min_width, max_width, alphabet, error=ConfigError):
    """Raise 'error' unless the widths and alphabet can seed a dictionary."""
    if not MIN_WIDTH <= min_width <= MAX_WIDTH:
        raise error(f"minW must be {MIN_WIDTH}..{MAX_WIDTH}, got {min_width}")
    if not MIN_WIDTH <= max_width <= MAX_WIDTH:
        raise error(f"maxW must be {MIN_WIDTH}..{MAX_WIDTH}, got {max_width}")
    if min_width > max_width:
        raise error(f"minW must be <= maxW, got minW={min_width} maxW={max_width}")
    if not alphabet:
        raise error("Alphabet is empty")
    if len(set(alphabet)) != len(alphabet):
        raise error("Alphabet contains duplicate symbols")
    if len(alphabet) > (1 << max_width):
        raise error(f"Alphabet of {len(alphabet)} symbols does not fit in {max_width}-bit codes")


class Dictionary:
    """
    Bidirectional code <-> pattern map with capacity, width and eviction.

    Codes 0..A-1 are the alphabet and never change. Dynamic codes A.. are
    handed out in order until 'capacity' (2^max_width) is reached, after
    which the policy decides what a new pattern does:

        FREEZE  drop it
        RESET   forget every dynamic code, reseed, then insert it
        LRU     overwrite the code with the oldest last use
        LFU     overwrite the code with the fewest uses since (re)creation

    Ties go to the smaller code. With no dynamic codes at all (the alphabet
    fills the capacity) every policy drops the pattern.
    """

    def __init__(self, alphabet, min_width, max_width, policy=Policy.FREEZE,
                 observer: Optional[Callable[[Event], None]] = None):
        alphabet = bytes(alphabet)
        validate_params(min_width, max_width, alphabet)

        self.alphabet = alphabet
        self.alphabet_size = len(alphabet)
        self.min_width = min_width
        self.max_width = max_width
        self.capacity = 1 << max_width
        self.policy = Policy(policy)
        self.observer = observer

        self.roots: Dict[int, Pattern] = {}
        for code, symbol in enumerate(alphabet):
            root = Pattern(None, symbol)
            root.code = code
            self.roots[symbol] = root

        # Arena indexed by code. Metadata of alphabet codes stays at zero.
        self.slots: List[Optional[Pattern]] = list(self.roots.values())
        self.frequency: List[int] = [0] * self.alphabet_size
        self.last_used: List[int] = [0] * self.alphabet_size
        self.tracker = make_tracker(self.policy, self.frequency, self.last_used)

        self._index: Dict[Tuple[Pattern, int], Pattern] = {}
        self.timestamp = 0
        self.evictions = 0
        self.resets = 0
        self.seed()

    # ------------------------------------------------------------------
    # Seeding and width
    # ------------------------------------------------------------------

    def seed(self):
        """Drop every dynamic code and go back to the alphabet at min_width."""
        a = self.alphabet_size
        for node in self.slots[a:]:
            if node is not None:
                node.code = None
        # Trim in place: the tracker holds references to these lists
        del self.slots[a:]
        del self.frequency[a:]
        del self.last_used[a:]
        if self.tracker is not None:
            self.tracker.clear()

        self._index = {}
        for root in self.roots.values():
            root.fanout = 0

        self.next_code = a
        self.width = self.min_width
        self.pending: Optional[int] = None
        self.check_width()

    def check_width(self):
        """
        Widen codes when the next code no longer fits.

        Once seeded, next_code grows by one at a time, so this is exactly
        "bump when next_code == 2^width". The loop only matters at seed time,
        for an alphabet that already overflows min_width.
        """
        widened = False
        while self.width < self.max_width and self.next_code >= (1 << self.width):
            self.width += 1
            widened = True
            self._notify('widen', None, None)
        return widened

    # ------------------------------------------------------------------
    # Lookups (pure reads)
    # ------------------------------------------------------------------

    def lookup_by_code(self, code) -> Optional[Pattern]:
        if 0 <= code < len(self.slots):
            return self.slots[code]
        return None

    def lookup_by_pattern(self, pattern) -> Optional[int]:
        if isinstance(pattern, Pattern):
            node = pattern
        else:
            node = self.find(pattern)
        return None if node is None else node.code

    def find(self, data) -> Optional[Pattern]:
        """Walk the interned nodes for a byte string. The node may have no code."""
        if not data:
            return None
        node = self.roots.get(data[0])
        for byte in data[1:]:
            if node is None:
                return None
            node = self._index.get((node, byte))
        return node

    def child(self, pattern: Optional[Pattern], byte: int) -> Optional[Pattern]:
        """The pattern 'pattern + byte' if it has a code; a root when pattern is None."""
        if pattern is None:
            return self.roots.get(byte)
        node = self._index.get((pattern, byte))
        if node is None or node.code is None:
            return None
        return node

    # ------------------------------------------------------------------
    # Building patterns
    # ------------------------------------------------------------------

    def extend(self, pattern: Pattern, byte: int) -> Pattern:
        """Get or create the interned node for 'pattern + byte' (it may have no code)."""
        parent = self._canonical(pattern)
        key = (parent, byte)
        node = self._index.get(key)
        if node is None:
            node = Pattern(parent, byte)
            self._index[key] = node
            parent.fanout += 1
        return node

    def intern(self, data) -> Pattern:
        """Node for a byte string whose first byte is an alphabet symbol."""
        node = self.roots.get(data[0]) if data else None
        if node is None:
            raise InvalidCodeError(f"Pattern {bytes(data)!r} does not start with an alphabet symbol")
        for byte in data[1:]:
            node = self.extend(node, byte)
        return node

    def _canonical(self, node: Pattern) -> Pattern:
        """
        Re-intern a node that fell out of the index.

        That happens to a pattern the caller still holds after its code was
        evicted (and the node pruned) or after a reset wiped the index.
        """
        tail = []
        while node.prefix is not None and self._index.get((node.prefix, node.last)) is not node:
            tail.append(node.last)
            node = node.prefix
        if node.prefix is None:
            node = self.roots[node.last]
        for byte in reversed(tail):
            node = self.extend(node, byte)
        return node

    def _prune(self, node: Pattern):
        # Drop code-less leaves so evicted patterns don't pile up
        while (node.prefix is not None and node.code is None and node.fanout == 0
               and self._index.get((node.prefix, node.last)) is node):
            del self._index[(node.prefix, node.last)]
            node = node.prefix
            node.fanout -= 1

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def reference(self, code):
        """Tick the logical clock for a matched (encoder) or decoded (decoder) code."""
        self.timestamp += 1
        if code >= self.alphabet_size:
            self.frequency[code] += 1
            self.last_used[code] = self.timestamp
            if self.tracker is not None:
                self.tracker.use(code)

    def try_insert(self, pattern=None) -> Outcome:
        """
        Give 'pattern' a code, or apply the full-dictionary policy.

        The decoder only learns a pattern's last byte from the following
        codeword, so it passes None: the slot is claimed now, at the same
        point the encoder inserts, and filled in later with bind(). Until
        then the slot is 'pending' and is the one code that may legally
        appear in the stream without a pattern.
        """
        if pattern is not None and not isinstance(pattern, Pattern):
            pattern = self.intern(pattern)

        self.check_width()

        if self.next_code < self.capacity:
            outcome = Outcome(INSERTED, self._allocate())
        elif self.next_code == self.alphabet_size or self.policy == Policy.FREEZE:
            outcome = Outcome(FROZEN, None)
        elif self.policy == Policy.RESET:
            self.resets += 1
            self.seed()
            outcome = Outcome(RESET, self._allocate())
        else:
            victim = self.tracker.find_victim()
            if victim is None:
                outcome = Outcome(FROZEN, None)
            else:
                self._evict(victim)
                outcome = Outcome(EVICTED, victim)

        self._notify(_EVENT_OF[outcome.kind], outcome.code, pattern)
        if outcome.code is None:
            if pattern is not None:
                self._prune(pattern)
        elif pattern is not None:
            self.bind(outcome.code, pattern)
        else:
            self.pending = outcome.code
        return outcome

    def bind(self, code, pattern):
        """Attach a pattern to a claimed slot."""
        if pattern is not None and not isinstance(pattern, Pattern):
            pattern = self.intern(pattern)
        node = self._canonical(pattern)
        if node.code is not None:
            raise InvalidCodeError(
                f"Pattern {bytes(node)!r} for code {code} is already code {node.code}")
        node.code = code
        self.slots[code] = node
        if self.pending == code:
            self.pending = None

    def _allocate(self):
        self.check_width()
        code = self.next_code
        self.slots.append(None)
        self.frequency.append(0)
        self.last_used.append(self.timestamp)
        self.next_code += 1
        if self.tracker is not None:
            self.tracker.use(code)
        return code

    def _evict(self, victim):
        old = self.slots[victim]
        self.slots[victim] = None
        if old is not None:
            old.code = None
            self._prune(old)
        self.frequency[victim] = 0
        self.last_used[victim] = self.timestamp
        self.tracker.use(victim)
        self.evictions += 1

    def _notify(self, kind, code, pattern):
        if self.observer is not None:
            self.observer(Event(kind, code, self.width, self.next_code,
                                None if pattern is None else bytes(pattern)))
