from enum import Enum


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Language(str, Enum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    OTHER = "other"


class MembershipFlag(str, Enum):
    """A per-user membership list and the Problem flag it mirrors."""

    FAVORITE = "favorites"
    SAVED = "saved"
    SOLVED = "solved"

    @property
    def list_name(self) -> str:
        return _LIST_NAMES[self]

    @property
    def problem_field(self) -> str:
        return _PROBLEM_FIELDS[self]


_LIST_NAMES = {
    MembershipFlag.FAVORITE: "favorites",
    MembershipFlag.SAVED: "saved_for_later",
    MembershipFlag.SOLVED: "solved_problems",
}

_PROBLEM_FIELDS = {
    MembershipFlag.FAVORITE: "is_favorite",
    MembershipFlag.SAVED: "is_saved_for_later",
    MembershipFlag.SOLVED: "is_solved",
}
