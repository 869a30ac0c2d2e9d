"""PDF export of a generated plan.

Layout: cover with the constitution and guiding principles, one table per
week (days x meal categories), then supplements and lifestyle practices.

Where to change the theme
-------------------------
• Palette: the ``VATA_BLUE``-style constants below.
• Text sizes: ``FONT_SIZES``.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from agents.knowledge_base import KnowledgeBase, describe_lifestyle
from agents.plan_builder import Plan
from modules.assessment.dto import Category

logger = logging.getLogger(__name__)

VATA_BLUE = colors.HexColor("#DBEAFE")
PITTA_RED = colors.HexColor("#FEE2E2")
KAPHA_GREEN = colors.HexColor("#DCFCE7")
HEADER_GREY = colors.HexColor("#374151")
GRID_GREY = colors.HexColor("#D1D5DB")

CATEGORY_COLORS = {
    Category.VATA: VATA_BLUE,
    Category.PITTA: PITTA_RED,
    Category.KAPHA: KAPHA_GREEN,
}

FONT_SIZES = {
    "small": 8,
    "body": 10,
}

SUPPLEMENT_DISCLAIMER = (
    "Consult with your healthcare provider before starting any new supplements. "
    "These recommendations are based on traditional Ayurvedic practices and your "
    "constitutional assessment."
)


def _styles() -> Dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "title": styles["Title"],
        "heading": styles["Heading2"],
        "subheading": styles["Heading3"],
        "normal": styles["Normal"],
        "small": ParagraphStyle("small", parent=styles["Normal"], fontSize=FONT_SIZES["small"], leading=10),
        "cell": ParagraphStyle("cell", parent=styles["Normal"], fontSize=FONT_SIZES["body"] - 1, leading=11),
    }


def _bullets(items, style: ParagraphStyle) -> List[Any]:
    return [Paragraph(f"• {escape(item)}", style) for item in items]


def _build_cover_story(plan: Plan, styles: Dict[str, ParagraphStyle]) -> List[Any]:
    story: List[Any] = [Paragraph("Your Personalized Diet Plan", styles["title"])]
    constitution = plan.category.label.upper()
    if plan.secondary:
        constitution = f"{constitution} with {plan.secondary.label} influence"
    story.append(Paragraph(f"Customized for your {constitution} constitution", styles["normal"]))
    story.append(
        Paragraph(
            f"{plan.duration_weeks} week(s) · {plan.total_meal_slots} meals · seed {plan.seed}",
            styles["small"],
        )
    )
    if plan.restriction_unsatisfiable:
        meals = ", ".join(plan.unsatisfiable_meals)
        story.append(
            Paragraph(
                f"<b>Note:</b> your restrictions could not be met for {meals}; "
                "those meals use the full menu.",
                styles["small"],
            )
        )
    story.append(Spacer(1, 12))

    story.append(Paragraph("Guiding principles", styles["heading"]))
    story.extend(_bullets(plan.principles, styles["normal"]))
    story.append(Spacer(1, 8))

    story.append(Paragraph("Recommended foods", styles["subheading"]))
    story.append(Paragraph(escape(", ".join(plan.foods_to_include)) or "-", styles["normal"]))
    story.append(Paragraph("Foods to avoid", styles["subheading"]))
    story.append(Paragraph(escape(", ".join(plan.foods_to_avoid)) or "-", styles["normal"]))

    if plan.goal_guidance:
        story.append(Spacer(1, 8))
        story.append(Paragraph("For your goals", styles["subheading"]))
        story.extend(_bullets(plan.goal_guidance, styles["normal"]))
    return story


def _build_week_story(plan: Plan, week: int, styles: Dict[str, ParagraphStyle]) -> List[Any]:
    header = ["Day"] + [meal.title() for meal in plan.meal_categories]
    rows: List[List[Any]] = [header]
    for day in plan.week(week):
        rows.append(
            [Paragraph(day.day_name, styles["cell"])]
            + [Paragraph(escape(day.meals.get(meal, "-")), styles["cell"]) for meal in plan.meal_categories]
        )

    table = Table(rows, colWidths=[2.6 * cm] + [4.8 * cm] * len(plan.meal_categories), repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_GREY),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("BACKGROUND", (0, 1), (0, -1), CATEGORY_COLORS.get(plan.category, VATA_BLUE)),
                ("GRID", (0, 0), (-1, -1), 0.5, GRID_GREY),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    return [Paragraph(f"Week {week}", styles["heading"]), table, Spacer(1, 12)]


def _build_lifestyle_story(
    plan: Plan,
    styles: Dict[str, ParagraphStyle],
    kb: Optional[KnowledgeBase],
) -> List[Any]:
    story: List[Any] = [Paragraph("Supplements", styles["heading"])]
    story.extend(_bullets(plan.supplements, styles["normal"]))
    story.append(Paragraph(f"<b>Important:</b> {SUPPLEMENT_DISCLAIMER}", styles["small"]))
    story.append(Spacer(1, 12))

    story.append(Paragraph("Lifestyle", styles["heading"]))
    for practice in plan.lifestyle:
        story.append(Paragraph(f"<b>{escape(practice)}</b>", styles["normal"]))
        if kb is not None:
            story.append(Paragraph(escape(describe_lifestyle(practice, kb)), styles["small"]))

    if plan.daily_routine:
        story.append(Spacer(1, 12))
        story.append(Paragraph("Daily routine", styles["heading"]))
        for moment, steps in plan.daily_routine.items():
            story.append(Paragraph(moment.title(), styles["subheading"]))
            story.extend(_bullets(steps, styles["small"]))
    return story


def render_plan_pdf(plan: Plan, kb: Optional[KnowledgeBase] = None) -> bytes:
    """Render ``plan`` to PDF bytes."""

    styles = _styles()
    story: List[Any] = _build_cover_story(plan, styles)
    for week in range(1, plan.duration_weeks + 1):
        story.append(PageBreak())
        story.extend(_build_week_story(plan, week, styles))
    story.append(PageBreak())
    story.extend(_build_lifestyle_story(plan, styles, kb))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title="Diet Plan",
    )
    doc.build(story)
    data = buffer.getvalue()
    logger.info("pdf.plan.rendered category=%s weeks=%s bytes=%s", plan.category.value, plan.duration_weeks, len(data))
    return data


def save_plan_pdf(plan: Plan, destination: str | Path, kb: Optional[KnowledgeBase] = None) -> Path:
    """Write the plan PDF to ``destination`` and return the path."""

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(render_plan_pdf(plan, kb))
    return path


__all__ = ["SUPPLEMENT_DISCLAIMER", "render_plan_pdf", "save_plan_pdf"]
