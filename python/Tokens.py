from typing import Dict

# token kinds, in descending stabilization priority
KIND_WORD = "word"
KIND_COMMAND = "command"
KIND_LETTER = "letter"
KIND_NONE = "none"

KINDS = (KIND_WORD, KIND_COMMAND, KIND_LETTER, KIND_NONE)

# higher rank wins ties in the stabilizer vote
KIND_RANK: Dict[str, int] = {
    KIND_WORD: 3,
    KIND_COMMAND: 2,
    KIND_LETTER: 1,
    KIND_NONE: 0,
}

# sentinels
NONE = "NONE"  # no hand observed this frame
UNKNOWN = "..."  # hand present, no rule matched

# commands
SPACE = "SPACE"
BACKSPACE = "BACKSPACE"

# words
HELLO = "HELLO"
THANK_YOU = "THANK YOU"
YES = "YES"
NO = "NO"
LOVE = "LOVE"

LETTERS = ("A", "B", "C", "D", "E", "I", "L", "S", "T", "U", "V", "Y")

TOKEN_KINDS: Dict[str, str] = {
    NONE: KIND_NONE,
    UNKNOWN: KIND_NONE,
    SPACE: KIND_COMMAND,
    BACKSPACE: KIND_COMMAND,
    HELLO: KIND_WORD,
    THANK_YOU: KIND_WORD,
    YES: KIND_WORD,
    NO: KIND_WORD,
    LOVE: KIND_WORD,
}
TOKEN_KINDS.update({letter: KIND_LETTER for letter in LETTERS})


def kind_of(token: str) -> str:
    """Kind of a vocabulary token; anything outside the vocabulary is a sentinel."""
    return TOKEN_KINDS.get(token, KIND_NONE)


def is_sentinel(token: str) -> bool:
    return kind_of(token) == KIND_NONE
