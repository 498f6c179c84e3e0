"""Deterministic templated artifacts used when the model output is unusable.

Every builder substitutes the real facts it has and a readable generic phrase
for anything still set to the "not specified" sentinel, and every result
passes ``validate_artifact`` for its shape.
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Callable, Optional
from urllib.parse import urlparse

from models import (
    EmailCadence,
    EmailCadenceStep,
    Objection,
    ObjectionHandling,
    PitchStrategy,
    ProductInfo,
    is_specified,
)
from pipeline.errors import ShapeError
from pipeline.schemas import ArtifactShape, validate_artifact

logger = logging.getLogger("pitch_builder")

FIRST_NAME = "{{first_name}}"
COMPANY = "{{company}}"
SENDER = "{{my.first_name}}"


def _fact(value: Optional[str], placeholder: str) -> str:
    return value.strip() if is_specified(value) else placeholder


class _Facts:
    """ProductInfo with placeholders already substituted."""

    def __init__(self, info: ProductInfo):
        self.product_name = _fact(info.product_name, "our product")
        self.core_problem = _fact(info.core_problem, "key business challenges")
        self.customer_challenges = _fact(info.customer_challenges, "operational challenges")
        self.product_solution = _fact(info.product_solution, "address these pain points")
        self.differentiators = _fact(info.differentiators, "our unique approach")
        self.success_stories = _fact(
            info.success_stories, "a proven track record with similar companies"
        )
        self.ideal_customer = _fact(
            info.ideal_customer, "companies looking to improve efficiency"
        )
        self.objections = _fact(info.objections, "comprehensive support and proven ROI")
        self.features = [f for f in info.key_features if is_specified(f)]
        self.has_success_stories = is_specified(info.success_stories)
        self.has_differentiators = is_specified(info.differentiators)
        self.known_objections = (
            [o.strip() for o in info.objections.split(",") if o.strip()]
            if is_specified(info.objections)
            else []
        )

    def features_text(self, sep: str = ", ", limit: Optional[int] = None) -> str:
        features = self.features[:limit] if limit else self.features
        if not features:
            return "comprehensive solutions tailored to your needs"
        return sep.join(features)


# ------------------------------------------------------------------
# Pitch strategy
# ------------------------------------------------------------------

def synthesize_pitch_strategy(product_info: ProductInfo) -> PitchStrategy:
    f = _Facts(product_info)
    return PitchStrategy(
        cold_call_starters=[
            f"Hi [Name], I hope I'm catching you at a good time. I noticed your company "
            f"might be facing challenges with {f.customer_challenges}. Do you have 30 seconds "
            f"for me to explain how we've helped similar companies?",
            f"Good morning [Name], I'm calling because we've been working with companies "
            f"like yours to solve {f.core_problem}. Would you be open to a brief "
            f"conversation about this?",
        ],
        talk_tracks=[
            f"Hi [Name], I understand that {f.customer_challenges} are significant challenges "
            f"for companies like yours. {f.product_name} is specifically designed to "
            f"{f.product_solution}. What sets us apart is {f.differentiators}, which has "
            f"helped companies achieve measurable results. Would you be interested in "
            f"learning more?",
            f"{f.product_name} solves {f.core_problem} for companies like yours, backed by "
            f"{f.success_stories}. Given your role and company focus, I believe there could "
            f"be a strong fit. Can we schedule a brief call to explore this further?",
        ],
        talking_points=[
            f"{f.product_name} directly addresses {f.core_problem}",
            f"Key features include: {f.features_text()}",
            f"What differentiates us: {f.differentiators}",
            f"Success stories: {f.success_stories}",
            f"Ideal for: {f.ideal_customer}",
            f"Addresses common objections: {f.objections}",
        ],
    )


# ------------------------------------------------------------------
# Objection handling
# ------------------------------------------------------------------

def synthesize_objection_handling(product_info: ProductInfo) -> ObjectionHandling:
    f = _Facts(product_info)
    proof = (
        f.success_stories
        if f.has_success_stories
        else "Our customers typically see ROI within the first year of implementation."
    )

    objections = [
        Objection(
            objection="The price seems too high for our budget.",
            response=(
                f"I understand price is a consideration. {f.product_name} offers "
                f"significant value through {f.features_text(' and ', limit=2)}."
            ),
            proof_point=proof,
        ),
        Objection(
            objection="How do we know this will work for our specific needs?",
            response=(
                f"That's a great question. {f.product_name} was designed specifically "
                f"for {f.ideal_customer}."
            ),
            proof_point=(
                f.differentiators
                if f.has_differentiators
                else "Our solution has been proven across similar organizations."
            ),
        ),
        Objection(
            objection="We're concerned about implementation complexity.",
            response=(
                "Implementation concerns are completely valid. We provide comprehensive "
                "support throughout the process."
            ),
            proof_point=(
                "Our implementation team ensures smooth deployment with minimal "
                "disruption to your operations."
            ),
        ),
        Objection(
            objection="How does this compare to other solutions we're considering?",
            response=f"{f.product_name} stands out because of {f.differentiators}.",
            proof_point=(
                f.success_stories
                if f.has_success_stories
                else "Our differentiated approach has helped customers achieve better "
                "results than alternatives."
            ),
        ),
        Objection(
            objection="We need to think about it and discuss internally.",
            response=(
                "Absolutely, this is an important decision that deserves careful "
                "consideration."
            ),
            proof_point=(
                "I can provide additional resources and references to help with your "
                "internal discussions."
            ),
        ),
    ]

    # Known objections replace the first two generic ones.
    for i, known in enumerate(f.known_objections[:2]):
        objections[i] = Objection(
            objection=known,
            response=(
                f"I understand your concern about {known.lower()}. "
                f"Let me address that directly."
            ),
            proof_point=(
                f.success_stories
                if f.has_success_stories
                else "We have proven results addressing this specific concern."
            ),
        )

    return ObjectionHandling(objection_handling=objections)


# ------------------------------------------------------------------
# Email cadence
# ------------------------------------------------------------------

def synthesize_email_cadence(
    product_info: ProductInfo,
    pitch_strategy: Optional[PitchStrategy] = None,
    objection_handling: Optional[list[Objection]] = None,
) -> EmailCadence:
    f = _Facts(product_info)
    talking_point = (
        pitch_strategy.talking_points[0]
        if pitch_strategy and pitch_strategy.talking_points
        else f"{f.product_name} directly addresses {f.core_problem}"
    )
    if objection_handling:
        first = objection_handling[0]
        objection_line = f"{first.response} {first.proof_point}"
    else:
        objection_line = f"{f.product_name} stands out because of {f.differentiators}."

    def email(subject: str, body: str) -> str:
        return f"**Subject:** {subject}\n**Body:** {body}\n\nBest,\n{SENDER}"

    steps = [
        ("Day 1", "Email #1 with POV", email(
            f"{FIRST_NAME} at {COMPANY}",
            f"Hi {FIRST_NAME}, with the growing pressure around {f.customer_challenges}, "
            f"I wanted to reach out. {f.product_name} helps teams like yours "
            f"{f.product_solution}. Would it be worth a quick conversation?",
        )),
        ("Day 1", "LinkedIn Connect",
         f"Hi {FIRST_NAME}, I work with {f.ideal_customer} on {f.core_problem}. "
         f"Would love to connect."),
        ("Day 1", "Call #1",
         f"Opener: reference {f.customer_challenges}. Voicemail: \"Hi {FIRST_NAME}, "
         f"it's {SENDER}. I sent you a note about {f.core_problem}. I'll follow up by "
         f"email.\""),
        ("Day 4", "Email #2", email(
            f"Re: {FIRST_NAME} at {COMPANY}",
            f"Hi {FIRST_NAME}, following up on my last note. {talking_point}. "
            f"Happy to share how this could apply to {COMPANY}.",
        )),
        ("Day 5", "LinkedIn Message",
         f"Thanks for connecting, {FIRST_NAME}. Curious how {COMPANY} is handling "
         f"{f.core_problem} today?"),
        ("Day 5", "Call #2",
         f"Lead with {f.differentiators}. Ask how {COMPANY} currently approaches "
         f"{f.core_problem}."),
        ("Day 8", "Email #3 with Case Study", email(
            f"How others solved {f.core_problem}",
            f"Hi {FIRST_NAME}, I thought this might be relevant: {f.success_stories}. "
            f"Would a 15-minute call next week make sense?",
        )),
        ("Day 8", "Call #3",
         f"Share the success story ({f.success_stories}) and ask for a short meeting."),
        ("Day 12", "Email #4", email(
            f"A common concern about {f.product_name}",
            f"Hi {FIRST_NAME}, teams often ask us about this. {objection_line}",
        )),
        ("Day 12", "LinkedIn Follow-up",
         f"Hi {FIRST_NAME}, just sent you a short note on {f.core_problem}. "
         f"Worth a look when you have a moment."),
        ("Day 12", "Call #4",
         f"Address likely objections ({f.objections}) and confirm the right contact."),
        ("Day 16", "Email #5 Breakup", email(
            f"Should I close the loop, {FIRST_NAME}?",
            f"Hi {FIRST_NAME}, I haven't heard back, so I'll assume {f.core_problem} "
            f"isn't a priority right now. If that changes, I'm happy to show how "
            f"{f.product_name} can help.",
        )),
        ("Day 16", "Call #5",
         f"Final attempt: brief recap of {f.product_name} and an offer to reconnect "
         f"next quarter."),
    ]

    cadence = []
    for i, (day, step_type, content) in enumerate(steps, start=1):
        if "Email" in step_type:
            kind = "Email"
        elif "LinkedIn" in step_type:
            kind = "LinkedIn"
        else:
            kind = "Call"
        cadence.append(
            EmailCadenceStep(
                day=day,
                step=f"Step {i}",
                type=step_type if kind == "Email" else f"{kind}: {step_type}",
                content=content,
            )
        )
    return EmailCadence(email_cadence=cadence)


# ------------------------------------------------------------------
# Product info
# ------------------------------------------------------------------

def _name_from_source(website: Optional[str], source_name: Optional[str]) -> Optional[str]:
    if source_name:
        stem = PurePosixPath(source_name).stem
        stem = re.sub(r"[_\-]+", " ", stem).strip()
        if stem:
            return stem.title()
    if website:
        host = urlparse(website if "://" in website else f"https://{website}").hostname or ""
        host = re.sub(r"^www\.", "", host)
        label = host.split(".")[0] if host else ""
        if label:
            return label.replace("-", " ").title()
    return None


def synthesize_product_info(
    website: Optional[str] = None, source_name: Optional[str] = None
) -> ProductInfo:
    """Bare-bones ProductInfo naming the product after its source."""
    name = _name_from_source(website, source_name) or "Your Product"
    return ProductInfo(
        website=website,
        product_name=name,
        core_problem=f"The core problem {name} solves could not be determined automatically",
    )


# ------------------------------------------------------------------
# Revisions
# ------------------------------------------------------------------

def keep_current_or_synthesize(current, shape: ArtifactShape, synthesize: Callable[[], object]):
    """Fallback for revision stages: the caller's current artifact if valid."""
    try:
        return validate_artifact(current, shape)
    except ShapeError as e:
        logger.warning(f"Current {shape.value} unusable as fallback ({e}); synthesizing")
        return synthesize()
