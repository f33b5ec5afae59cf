"""Predicate library: pure boolean tests over learner HTML/CSS source text.

Every predicate has the shape ``(html, css) -> bool``. Matching is done on
normalized text (lower-cased, whitespace runs collapsed to one space), so
cosmetic formatting never changes a verdict. These are textual heuristics,
not a DOM or CSS parser.

Two lookups are exported:

- ``PREDICATES``: named predicates referenced from case content
  (objective templates and puzzles). Unknown names are content bugs and
  raise ``KeyError`` when resolved.
- ``CONDITIONS``: human-readable condition text (hint steps and mission
  success conditions) mapped to predicates. Unknown text is "not yet
  satisfiable" and evaluates to ``False``.
"""
import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

Predicate = Callable[[str, str], bool]

_WHITESPACE_RE = re.compile(r"\s+")
_VALUE_PUNCT_RE = re.compile(r"\s*([(),/])\s*")


def normalize_code(text: Any) -> str:
    """Lower-case and collapse whitespace; non-string input counts as empty."""
    if not isinstance(text, str) or not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def _normalize_value(value: str) -> str:
    value = normalize_code(value).replace("!important", "").strip()
    return _VALUE_PUNCT_RE.sub(r"\1", value)


# ---------- declarations ----------


class DeclarationState(str, Enum):
    """Outcome of looking for ``property: value`` in source text."""

    MATCH = "match"
    ABSENT = "absent"
    OTHER = "other"  # present with a different or malformed value


def _declaration_re(prop: str) -> re.Pattern[str]:
    # Value runs to ; } or a quote/angle bracket (inline style attributes).
    # A trailing { means we hit a selector like `.display:hover {`, not a declaration.
    return re.compile(r"(?<![\w-])" + re.escape(prop.lower()) + r"\s*:\s*([^;{}\"'<>]*)(?=[;}\"'<>]|$)")


def declared_values(text: str, prop: str) -> list[str]:
    """Return every normalized value declared for ``prop`` in order; empty values are kept."""
    normalized = normalize_code(text)
    return [_normalize_value(match.group(1)) for match in _declaration_re(prop).finditer(normalized)]


def declaration_state(text: str, prop: str, expected: str) -> DeclarationState:
    values = declared_values(text, prop)
    if not values:
        return DeclarationState.ABSENT
    if _normalize_value(expected) in values:
        return DeclarationState.MATCH
    return DeclarationState.OTHER


def _reveals(text: str, prop: str, hidden: str, shown: str) -> bool:
    values = declared_values(text, prop)
    if _normalize_value(shown) not in values:
        return False
    # Old and new value side by side, or a half-typed `display: ;`, is a malformed edit.
    return _normalize_value(hidden) not in values and "" not in values


# ---------- building blocks ----------


def html_contains(*tokens: str) -> Predicate:
    """True when the HTML contains any of ``tokens``."""
    needles = tuple(normalize_code(token) for token in tokens)

    def predicate(html: str, css: str) -> bool:
        text = normalize_code(html)
        return any(needle in text for needle in needles)

    return predicate


def html_lacks(*tokens: str) -> Predicate:
    """True when the HTML contains none of ``tokens``."""
    return negate(html_contains(*tokens))


def css_contains(*tokens: str) -> Predicate:
    """True when the CSS contains any of ``tokens``."""
    needles = tuple(normalize_code(token) for token in tokens)

    def predicate(html: str, css: str) -> bool:
        text = normalize_code(css)
        return any(needle in text for needle in needles)

    return predicate


def css_lacks(*tokens: str) -> Predicate:
    return negate(css_contains(*tokens))


def css_declares(prop: str, *values: str) -> Predicate:
    """True when the CSS declares ``prop`` with exactly one of ``values``."""

    def predicate(html: str, css: str) -> bool:
        return any(declaration_state(css, prop, value) is DeclarationState.MATCH for value in values)

    return predicate


def css_reveals(prop: str, hidden: str, shown: str) -> Predicate:
    """True when ``prop: shown`` is declared and ``prop: hidden`` (or an empty value) is not."""

    def predicate(html: str, css: str) -> bool:
        return _reveals(css, prop, hidden, shown)

    return predicate


def html_reveals(prop: str, hidden: str, shown: str) -> Predicate:
    def predicate(html: str, css: str) -> bool:
        return _reveals(html, prop, hidden, shown)

    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    def predicate(html: str, css: str) -> bool:
        return all(item(html, css) for item in predicates)

    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    def predicate(html: str, css: str) -> bool:
        return any(item(html, css) for item in predicates)

    return predicate


def negate(inner: Predicate) -> Predicate:
    def predicate(html: str, css: str) -> bool:
        return not inner(html, css)

    return predicate


# ---------- named predicates (objective templates, puzzles) ----------

PREDICATES: dict[str, Predicate] = {
    # semantic structure
    "html-header-tag": html_contains("<header"),
    "html-mentions-header": html_contains("header"),
    "html-nav-tag": html_contains("<nav"),
    "html-mentions-navigation": html_contains("navigation"),
    "html-reveals-display": html_reveals("display", "none", "block"),
    # layout
    "css-display-flex": css_declares("display", "flex"),
    "css-mentions-flex": css_contains("flex"),
    "css-flex-column": css_declares("flex-direction", "column"),
    "css-align-items-center": css_declares("align-items", "center"),
    "css-justify-content-center": css_declares("justify-content", "center"),
    "css-overflow-visible": css_declares("overflow", "visible"),
    "css-top-zero": css_declares("top", "0", "0px"),
    "css-left-zero": css_declares("left", "0", "0px"),
    "css-grid-rows-minmax": css_declares("grid-auto-rows", "minmax(100px, auto)"),
    # visual styling
    "css-gradient": css_contains("gradient"),
    "css-hover": css_contains(":hover"),
    "css-transition": css_contains("transition"),
    "css-button-hover": css_contains(".btn:hover", "button:hover"),
    "css-card-hover": css_contains(".offer-card:hover", ".card:hover"),
    "css-transform": css_contains("transform"),
    "css-box-shadow": css_contains("box-shadow"),
    "css-cursor-pointer": css_declares("cursor", "pointer"),
    "css-reveals-display": css_reveals("display", "none", "block"),
    "css-reveals-visibility": css_reveals("visibility", "hidden", "visible"),
}

_COMBINATORS: dict[str, Callable[..., Predicate]] = {"all": all_of, "any": any_of}


def resolve_predicate(ref: Any, registry: Mapping[str, Predicate] = PREDICATES) -> Predicate:
    """Turn a predicate reference from content into a callable.

    A reference is a registry name, ``{"all": [refs]}``, ``{"any": [refs]}``
    or ``{"not": ref}``. Raises ``KeyError`` for unknown names and
    ``ValueError`` for malformed composites.
    """
    if isinstance(ref, str):
        if ref not in registry:
            raise KeyError(ref)
        return registry[ref]
    if not isinstance(ref, Mapping) or len(ref) != 1:
        raise ValueError(f"Malformed predicate reference: {ref!r}")
    operator, operand = next(iter(ref.items()))
    if operator == "not":
        return negate(resolve_predicate(operand, registry))
    if operator in _COMBINATORS:
        if not isinstance(operand, list) or not operand:
            raise ValueError(f"'{operator}' needs a non-empty list of references.")
        return _COMBINATORS[operator](*(resolve_predicate(item, registry) for item in operand))
    raise ValueError(f"Unknown predicate operator: {operator!r}")


# ---------- condition text (hint steps, mission success conditions) ----------

_no_center = html_lacks("<center>", "</center>")
_no_font = html_lacks("<font", "</font>")
_no_hidden_attr = html_lacks("hidden>", "hidden ")

CONDITIONS: dict[str, Predicate] = {
    # hint steps, mission 1
    "Remove <center> tags": _no_center,
    "Remove <font> tags": _no_font,
    "Remove <center> and <font> tags": all_of(_no_center, _no_font),
    "Remove hidden attribute": _no_hidden_attr,
    "Add semantic header tag": html_contains("<header>"),
    "Add semantic main tag": html_contains("<main>"),
    "Add semantic section tag": html_contains("<section>"),
    "Add semantic HTML5 elements": html_contains("<header>", "<main>", "<section>"),
    # hint steps, mission 2
    "Locate the hidden Instagram evidence": html_contains('id="insta-clue"', "instagram-evidence"),
    "Change display: none to display: block": css_reveals("display", "none", "block"),
    "Add styling to the revealed evidence": css_contains(".instagram-evidence", "#insta-clue"),
    # hint steps, mission 3
    "Locate the hidden address information": html_contains('id="address-clue"', "warehouse 17"),
    "Change visibility: hidden to visibility: visible": css_reveals("visibility", "hidden", "visible"),
    "Replace deprecated <font> tags": _no_font,
    # older step wording still present in saved content
    "Change display none to block": css_reveals("display", "none", "block"),
    "Change visibility hidden to visible": css_reveals("visibility", "hidden", "visible"),
    "Add flexbox layout": any_of(css_declares("display", "flex"), css_contains("flexbox")),
    "Add CSS grid": any_of(css_declares("display", "grid"), css_contains("grid-template")),
    "Remove inline styles": html_lacks("style="),
    # mission success conditions
    "Remove the hidden attribute and make the message visible": all_of(
        html_lacks("hidden>", "hidden ", " hidden", 'style="display: none"', 'style="display:none"'),
        html_contains("check my last insta story"),
    ),
    "Replace <center> tags with proper HTML structure": all_of(
        _no_center,
        html_contains("the truth about novacorp", "sam out"),
    ),
    "Apply proper CSS styling for the revealed message": css_contains(
        ".revealed-message", ".hidden-message", "background:", "border:", "animation:"
    ),
    "Change display: none to display: block on #insta-clue element": all_of(
        any_of(css_contains("#insta-clue"), html_contains('id="insta-clue"')),
        css_reveals("display", "none", "block"),
    ),
    "Style the revealed Instagram evidence section appropriately": css_contains(
        "#insta-clue", ".instagram-evidence", ".social-post", "border:", "animation:", "background:"
    ),
    "Change visibility: hidden to visibility: visible on #address-clue": all_of(
        any_of(css_contains("#address-clue"), html_contains('id="address-clue"')),
        css_reveals("visibility", "hidden", "visible"),
    ),
    "Replace <font> tags with modern CSS styling": all_of(
        _no_font,
        html_contains("warehouse 17", "dockside street", "12:00 am", "address-clue"),
    ),
    "Apply proper styling to the revealed location information": css_contains(
        "#address-clue",
        ".location-clue",
        ".critical-location",
        "color:",
        "font-size:",
        "background:",
        "animation:",
        "border:",
    ),
    "Replace <center> tags with proper semantic HTML elements": all_of(
        _no_center,
        html_contains("<header>", "<footer>", "<main>"),
        html_contains("<body>"),
    ),
    "Use modern HTML5 semantic elements (header, main, footer)": all_of(
        html_contains("<header>"),
        html_contains("<main>"),
        html_contains("<footer>", "</body>"),
    ),
}


def is_known_condition(condition: str) -> bool:
    return condition in CONDITIONS


def check_condition(condition: str, html: str, css: str) -> bool:
    """Evaluate condition text; unrecognized text is not yet satisfiable."""
    predicate = CONDITIONS.get(condition)
    if predicate is None:
        return False
    return predicate(html, css)
