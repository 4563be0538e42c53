"""Proposal composer: a short outreach message for one lead."""

import logging
import re

from src.backend.base import LLMProvider
from src.core.schemas import Lead

logger = logging.getLogger(__name__)

DEFAULT_SKILLS = "Full Stack Development, React, Node.js"
PROPOSAL_FALLBACK = "Error generating proposal. Please try again."

_CYRILLIC_RE = re.compile(r"[а-яА-ЯёЁ]")


def proposal_language(lead: Lead) -> str:
    """Russian when the lead title is written in Cyrillic, English otherwise."""
    return "Russian" if _CYRILLIC_RE.search(lead.title) else "English"


def compose_proposal_prompt(lead: Lead, skills: str = DEFAULT_SKILLS) -> str:
    """Assemble the outreach-writing prompt from lead context and skills."""
    client_section = (
        "Client Context:\n"
        f'- Project Title: "{lead.title}"\n'
        f'- Description: "{lead.description}"\n'
        f"- Platform: {lead.platform}\n"
        f"- Client Name: {lead.contacts.contact_name or 'Client'}\n"
    )

    profile_section = f"My Profile:\n- Skills: {skills}\n"

    requirements = (
        "Requirements for the message:\n"
        f"1. Language: {proposal_language(lead)}.\n"
        "2. Tone: Professional but conversational. Not robotic.\n"
        "3. Structure:\n"
        "   - Brief greeting.\n"
        "   - Acknowledge their specific problem/need mentioned in description.\n"
        "   - Briefly state why I can solve it (referencing my skills).\n"
        '   - Call to action (e.g., "Let\'s discuss details").\n'
        "4. Length: Short! Suitable for a Telegram DM or a quick Email. "
        "Max 100-150 words.\n"
        '5. Do not include placeholders like [Your Name], just sign off as "Developer".\n'
    )

    return (
        "Task: Write a short, punchy, and professional freelance cover letter "
        "(message) to a potential client.\n\n"
        f"{client_section}\n{profile_section}\n{requirements}"
    )


async def generate_proposal(
    lead: Lead,
    provider: LLMProvider,
    skills: str = DEFAULT_SKILLS,
    model: str | None = None,
) -> str:
    """Generate outreach text for a lead.

    Returns the backend text verbatim. On any backend error, or when no text
    comes back, returns PROPOSAL_FALLBACK instead of raising.
    """
    prompt = compose_proposal_prompt(lead, skills)
    try:
        text = await provider.generate(prompt, model)
    except Exception:
        logger.warning(
            "Proposal generation failed for '%s' (%s)", lead.title, lead.id, exc_info=True,
        )
        return PROPOSAL_FALLBACK

    if not text:
        logger.warning("Backend returned no proposal text for '%s' (%s)", lead.title, lead.id)
        return PROPOSAL_FALLBACK
    return text
