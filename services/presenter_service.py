"""
Result presenter.

Pure functions from an `AnalysisOutcome` (or None) to the HTML shown in each
tab of the viewer. Nothing here transforms analysis values: strings are shown
verbatim (HTML-escaped), empty values drop their row or section.
"""
import re
from dataclasses import dataclass
from html import escape
from typing import Iterable, Optional

from core.models import AnalysisOutcome, AnalysisResult

TAB_BRANDING = "branding"
TAB_ELEMENTS = "elementos"
TAB_INFORMATION = "informacoes"
TAB_LAYOUT = "diagramacao"
TAB_MATERIALS = "materiais"
TAB_JSON = "json"

# (id, label) in display order
TABS = (
    (TAB_BRANDING, "Branding"),
    (TAB_ELEMENTS, "Elementos"),
    (TAB_INFORMATION, "Informações"),
    (TAB_LAYOUT, "Diagramação"),
    (TAB_MATERIALS, "Materiais"),
    (TAB_JSON, "JSON Raw"),
)
DEFAULT_TAB = TAB_BRANDING

STATUS_READY = "SISTEMA PRONTO"
STATUS_BUSY = "PROCESSANDO..."
BUSY_OVERLAY_TEXT = "Processando Visão Computacional..."

PLACEHOLDER_TEXT = "Aguardando input de imagem para iniciar a engenharia reversa do layout."
EMPTY_TAB_TEXT = "Nenhum dado extraído para esta categoria."
FOOTER_TITLE = "Análise Técnica do Design"
MATERIALS_REPOSITORY = "Heverton-web/materials"

# Hex and simple functional/named CSS colours; anything else gets no fill.
CSS_COLOR_PATTERN = re.compile(r"^(#[0-9a-fA-F]{3,8}|(rgb|rgba|hsl|hsla)\([0-9.,%\s]+\)|[a-zA-Z]+)$")


@dataclass(frozen=True)
class PresentedView:
    """Everything the UI needs for one render."""

    branding: str
    elements: str
    information: str
    layout: str
    materials: str
    raw_json: str
    footer: str
    banner: str
    has_result: bool

    def tab(self, tab_id: str) -> str:
        return {
            TAB_BRANDING: self.branding,
            TAB_ELEMENTS: self.elements,
            TAB_INFORMATION: self.information,
            TAB_LAYOUT: self.layout,
            TAB_MATERIALS: self.materials,
            TAB_JSON: self.raw_json,
        }[tab_id]


def status_text(busy: bool) -> str:
    return STATUS_BUSY if busy else STATUS_READY


def render_busy_overlay(busy: bool) -> str:
    """Spinner caption shown over the dimmed preview while an analysis runs."""
    if not busy:
        return ""
    return f'<div class="busy-overlay"><span class="spinner"></span>{escape(BUSY_OVERLAY_TEXT)}</div>'


def render_placeholder() -> str:
    return f'<div class="placeholder"><p>{escape(PLACEHOLDER_TEXT)}</p></div>'


def _section(title: str, body: str) -> str:
    return f'<div class="section"><h3>{escape(title)}</h3>{body}</div>'


def _data_row(label: str, value: str) -> str:
    if not value:
        return ""
    return (
        '<div class="data-row">'
        f'<span class="data-label">{escape(label)}</span>'
        f'<span class="data-value">{escape(value)}</span>'
        '</div>'
    )


def _prose(title: str, value: str) -> str:
    if not value:
        return ""
    return _section(title, f"<p>{escape(value)}</p>")


def _bullets(title: str, items: Iterable[str], css_class: str = "bullets") -> str:
    items = [item for item in items if item]
    if not items:
        return ""
    lis = "".join(f"<li>{escape(item)}</li>" for item in items)
    return _section(title, f'<ul class="{css_class}">{lis}</ul>')


def _tab_body(parts: Iterable[str]) -> str:
    body = "".join(part for part in parts if part)
    if not body:
        return f'<p class="empty-tab">{escape(EMPTY_TAB_TEXT)}</p>'
    return body


def _swatch(color: str) -> str:
    fill = color.strip()
    style = f' style="background-color: {fill}"' if CSS_COLOR_PATTERN.match(fill) else ""
    return (
        '<div class="swatch">'
        f'<div class="swatch-color"{style}></div>'
        f'<span class="swatch-code">{escape(color)}</span>'
        '</div>'
    )


def render_branding(result: AnalysisResult) -> str:
    branding = result.branding
    palette = [color for color in branding.palette if color]
    swatches = ""
    if palette:
        swatches = _section(
            "Paleta de Cores",
            '<div class="swatches">' + "".join(_swatch(c) for c in palette) + "</div>",
        )
    return _tab_body([
        swatches,
        _prose("Tipografia", branding.typography),
        _bullets("Efeitos Visuais", branding.effects),
    ])


def render_elements(result: AnalysisResult) -> str:
    elements = result.elements
    return _tab_body([
        _bullets("Objetos Centrais", elements.central_objects),
        _prose("Tratamento Visual", elements.visual_treatment),
    ])


def render_information(result: AnalysisResult) -> str:
    info = result.information
    return _tab_body([
        _data_row("Headline", info.headline),
        _data_row("Subheadline", info.subheadline),
        _data_row("Call to Action", info.cta),
        _bullets("Outros Textos", [f'"{text}"' for text in info.other_texts if text], "quotes"),
    ])


def render_layout(result: AnalysisResult) -> str:
    layout = result.layout
    return _tab_body([
        _data_row("Grid Estrutural", layout.grid),
        _data_row("Alinhamento", layout.alignment),
        _bullets("Posicionamento Espacial", layout.positioning, "positions"),
    ])


def render_materials(result: AnalysisResult) -> str:
    return _tab_body([
        _bullets(
            f"Mapeamento de Repositório ({MATERIALS_REPOSITORY})",
            result.materials.repository_suggestions,
            "materials",
        ),
    ])


def render_raw_json(result: AnalysisResult) -> str:
    return result.to_json()


def render_footer(result: AnalysisResult) -> str:
    return (
        '<div class="footer">'
        f"<h4>{escape(FOOTER_TITLE)}</h4>"
        f"<p>{escape(result.technical_explanation)}</p>"
        "</div>"
    )


def render_banner(outcome: AnalysisOutcome) -> str:
    if outcome.is_complete:
        return ""
    fields = ", ".join(outcome.missing_fields)
    return (
        '<div class="banner banner-warning">'
        f"⚠️ Resposta incompleta do modelo. Campos ausentes: {escape(fields)}"
        "</div>"
    )


def present(outcome: Optional[AnalysisOutcome]) -> PresentedView:
    """Render every tab for the current outcome, or the placeholder state."""
    if outcome is None:
        placeholder = render_placeholder()
        return PresentedView(
            branding=placeholder,
            elements=placeholder,
            information=placeholder,
            layout=placeholder,
            materials=placeholder,
            raw_json="",
            footer="",
            banner="",
            has_result=False,
        )

    result = outcome.result
    return PresentedView(
        branding=render_branding(result),
        elements=render_elements(result),
        information=render_information(result),
        layout=render_layout(result),
        materials=render_materials(result),
        raw_json=render_raw_json(result),
        footer=render_footer(result),
        banner=render_banner(outcome),
        has_result=True,
    )
