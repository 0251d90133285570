"""Prompt templates and builders for Gemini mockup generation and editing."""

from __future__ import annotations
from dataclasses import dataclass


SYSTEM_PROMPT = """You are an expert product photographer and merchandise designer.
When given a logo, your goal is to place it realistically onto the specified product.
Ensure lighting, shadows, and fabric texture interact naturally with the logo graphics.
The logo should be sharp, properly oriented, and look like a high-quality screen print or embroidery."""


# --- GENERATION PROMPT ---

GENERATE_PROMPT_TEMPLATE = """Create a professional, high-end studio product photograph of {PRODUCT}.
Place the provided logo prominently and realistically on the product.
Use {LIGHTING_DESCRIPTION} and {BACKGROUND_DESCRIPTION}.
The logo should look like it is {PRINT_FINISH}."""


# --- EDIT PROMPT ---

EDIT_PROMPT_TEMPLATE = """Modify this image based on the following instruction: "{INSTRUCTION}".
Maintain the overall composition and the integrity of the product and logo, but apply the requested changes accurately."""


@dataclass(frozen=True)
class PromptDefaults:
    """Default art direction for mockup generation prompts."""

    lighting_description: str = "cinematic lighting"
    background_description: str = "a clean, neutral background"
    print_finish: str = "physically printed on the material"


DEFAULTS = PromptDefaults()


def build_generation_prompt(
    product: str,
    lighting_description: str | None = None,
    background_description: str | None = None,
    print_finish: str | None = None,
) -> str:
    """Render the generation instruction for an already sanitized product description."""
    if not product:
        raise ValueError("Product description is required to build a generation prompt.")

    return GENERATE_PROMPT_TEMPLATE.format(
        PRODUCT=product,
        LIGHTING_DESCRIPTION=lighting_description or DEFAULTS.lighting_description,
        BACKGROUND_DESCRIPTION=background_description or DEFAULTS.background_description,
        PRINT_FINISH=print_finish or DEFAULTS.print_finish,
    )


def build_edit_prompt(instruction: str) -> str:
    """Render the edit instruction for an already sanitized user request."""
    if not instruction:
        raise ValueError("Edit instruction is required to build an edit prompt.")

    return EDIT_PROMPT_TEMPLATE.format(INSTRUCTION=instruction)


__all__ = [
    "SYSTEM_PROMPT",
    "GENERATE_PROMPT_TEMPLATE",
    "EDIT_PROMPT_TEMPLATE",
    "DEFAULTS",
    "PromptDefaults",
    "build_generation_prompt",
    "build_edit_prompt",
]
