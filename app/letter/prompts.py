"""
The prompt set: the ordered list of reflections a user answers.

The built-in set is defined below. A deployment can swap in different
wording by pointing PROMPT_CONFIG_PATH at a YAML file:

    prompts:
      - id: opening
        title: "If someone important to you ..."
        placeholder: "Share the moments ..."
        description: "Optional helper text shown under the title."

Usage:
    from app.letter.prompts import PromptSet
    prompts = PromptSet.default()
    prompts = PromptSet.from_yaml("config/prompts.yaml")
"""

import logging
from pathlib import Path
from typing import Iterator, Optional, Sequence

import yaml

from app.letter.schemas import Prompt

logger = logging.getLogger(__name__)


DEFAULT_PROMPTS: tuple[Prompt, ...] = (
    Prompt(
        id="opening",
        title=(
            "If someone important to you were hearing this many years from now, "
            "what would you want them to understand about the way you lived your life?"
        ),
        placeholder="Share the moments or beliefs that shaped your path.",
    ),
    Prompt(
        id="values",
        title=(
            "What principles or values do you believe should never be compromised, "
            "regardless of the situation?"
        ),
        placeholder="Name the values you want to pass along.",
    ),
    Prompt(
        id="memories",
        title="In your own words, what does a life well lived look like to you?",
        placeholder="Describe the qualities of a life that feels complete.",
    ),
    Prompt(
        id="lessons",
        title=(
            "Is there a mistake, habit, or way of thinking that you hope those who "
            "come after you can avoid?"
        ),
        placeholder="Offer a gentle warning or lesson learned.",
    ),
    Prompt(
        id="hopes",
        title=(
            "Is there something about you (your choices, your character, or your "
            "intentions) that people often misunderstand?"
        ),
        placeholder="Clarify what you hope others come to see clearly.",
    ),
    Prompt(
        id="closing",
        title=(
            "If this message were played during a difficult or important decision, "
            "what guidance would you want it to offer?"
        ),
        placeholder="Share the counsel that would steady someone you love.",
    ),
)


class PromptSet:
    """
    An ordered, validated collection of prompts.

    Ids must be unique and non-blank, titles non-blank, and the set
    non-empty. Order is the order answers appear in the letter.
    """

    def __init__(self, prompts: Sequence[Prompt]):
        prompts = tuple(prompts)
        if not prompts:
            raise ValueError("A prompt set needs at least one prompt")

        seen: set[str] = set()
        for prompt in prompts:
            if not prompt.id.strip():
                raise ValueError("Prompt ids must not be blank")
            if not prompt.title.strip():
                raise ValueError(f"Prompt '{prompt.id}' has a blank title")
            if prompt.id in seen:
                raise ValueError(f"Duplicate prompt id: {prompt.id}")
            seen.add(prompt.id)

        self._prompts = prompts

    @classmethod
    def default(cls) -> "PromptSet":
        return cls(DEFAULT_PROMPTS)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "PromptSet":
        """Load a prompt set from a YAML file with a top-level 'prompts' list."""
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Prompt config not found: {yaml_path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        entries = data.get("prompts", []) if isinstance(data, dict) else []
        if not isinstance(entries, list):
            raise ValueError(f"'prompts' in {yaml_path} must be a list")

        prompt_set = cls([Prompt(**entry) for entry in entries if isinstance(entry, dict)])
        logger.info(
            "prompt_set.loaded",
            extra={"action": "prompt_set.loaded", "path": str(path), "count": len(prompt_set)},
        )
        return prompt_set

    def __len__(self) -> int:
        return len(self._prompts)

    def __iter__(self) -> Iterator[Prompt]:
        return iter(self._prompts)

    @property
    def ids(self) -> list[str]:
        return [p.id for p in self._prompts]

    def empty_responses(self) -> dict[str, str]:
        """A response map with every prompt id mapped to ''."""
        return {p.id: "" for p in self._prompts}

    def is_complete(self, responses: dict[str, str]) -> bool:
        """True when every prompt has a non-blank answer."""
        return all(responses.get(p.id, "").strip() for p in self._prompts)


def load_prompt_set(yaml_path: Optional[str]) -> PromptSet:
    """The configured prompt set, or the built-in one when no path is given."""
    if yaml_path:
        return PromptSet.from_yaml(yaml_path)
    return PromptSet.default()
