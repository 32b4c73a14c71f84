"""Interest and user record models consumed by the comparison and growth engines."""

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

INTEREST_CATEGORIES: tuple[str, ...] = (
    "Music",
    "Sports",
    "Math",
    "Communication",
    "Creativity",
    "Technical",
    "Health",
    "Science",
    "Languages",
    "Arts",
    "Reading",
    "Writing",
    "Gaming",
    "Cooking",
    "Other",
)


class CamelModel(BaseModel):
    """Base model that serializes to camelCase and accepts either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SkillLevel(IntEnum):
    """Self-rated skill level (1-4)."""

    NOVICE = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    EXPERT = 4


class CommitmentLevel(StrEnum):
    """How much the user intends to invest in an interest."""

    CASUAL = "casual"
    AVERAGE = "average"
    INVESTED = "invested"
    COMPETITIVE = "competitive"

    @property
    def descriptor(self) -> str:
        """Adjective used in peer comparison messages."""
        return {
            CommitmentLevel.CASUAL: "casual",
            CommitmentLevel.AVERAGE: "regular",
            CommitmentLevel.INVESTED: "dedicated",
            CommitmentLevel.COMPETITIVE: "competitive",
        }[self]


class AgeRange(CamelModel):
    """Pre-bucketed age range. Equality is the cohort key."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @classmethod
    def parse(cls, text: str) -> "AgeRange":
        """Parse "13-15" style ranges; "51+" means 51-99."""
        text = text.strip()
        if text.endswith("+"):
            return cls(min=int(text[:-1]), max=99)
        low, high = text.split("-", 1)
        return cls(min=int(low), max=int(high))

    def __str__(self) -> str:
        return f"{self.min}-{self.max}"


class Interest(CamelModel):
    """One user's engagement with one interest category."""

    id: str | None = None
    user_id: str | None = None
    category: str = Field(min_length=1)
    subcategory: str | None = None
    current_level: SkillLevel
    intent_level: CommitmentLevel = CommitmentLevel.AVERAGE


class UserRecord(CamelModel):
    """What the data store holds about a user for comparisons and simulations."""

    user_id: str
    age_range: AgeRange
    interests: list[Interest] = Field(default_factory=list)
    allow_peer_comparisons: bool = False

    def interest_for(self, category: str) -> Interest | None:
        for interest in self.interests:
            if interest.category == category:
                return interest
        return None
