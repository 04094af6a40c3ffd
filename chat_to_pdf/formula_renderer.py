"""Formula Renderer Module

Detects TeX math spans in message text ($...$ inline, $$...$$ display) and
renders them to a visual Unicode form that the block rasterizer draws in a
monospace face. Rendering is best-effort: a span that cannot be rendered
keeps its original text.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import ImageFont

from .exceptions import FormulaRenderingError
from .models import TextSegment

# $$...$$ first so display math is not read as two inline spans.
# Inline math may not start or end with whitespace, nor be followed by a digit,
# which keeps prices like "$5 and $10" as plain text.
MATH_PATTERN = re.compile(
    r"\$\$(?P<display>.+?)\$\$|\$(?!\s)(?P<inline>[^$\n]+?)(?<!\s)\$(?!\d)",
    re.DOTALL,
)

SYMBOLS = {
    # Greek
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ", "epsilon": "ε",
    "varepsilon": "ε", "zeta": "ζ", "eta": "η", "theta": "θ", "vartheta": "ϑ",
    "iota": "ι", "kappa": "κ", "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ",
    "pi": "π", "rho": "ρ", "sigma": "σ", "tau": "τ", "upsilon": "υ",
    "phi": "φ", "varphi": "φ", "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ", "Xi": "Ξ",
    "Pi": "Π", "Sigma": "Σ", "Phi": "Φ", "Psi": "Ψ", "Omega": "Ω",
    # Operators and relations
    "cdot": "·", "times": "×", "div": "÷", "pm": "±", "mp": "∓",
    "leq": "≤", "le": "≤", "geq": "≥", "ge": "≥", "neq": "≠", "ne": "≠",
    "approx": "≈", "equiv": "≡", "sim": "∼", "propto": "∝", "ll": "≪", "gg": "≫",
    "infty": "∞", "sum": "∑", "prod": "∏", "int": "∫", "oint": "∮",
    "partial": "∂", "nabla": "∇", "circ": "∘", "degree": "°", "prime": "′",
    # Arrows
    "to": "→", "rightarrow": "→", "leftarrow": "←", "leftrightarrow": "↔",
    "Rightarrow": "⇒", "Leftarrow": "⇐", "Leftrightarrow": "⇔", "mapsto": "↦",
    "implies": "⇒", "iff": "⇔",
    # Sets and logic
    "in": "∈", "notin": "∉", "subset": "⊂", "subseteq": "⊆", "supset": "⊃",
    "cup": "∪", "cap": "∩", "emptyset": "∅", "forall": "∀", "exists": "∃",
    "neg": "¬", "land": "∧", "lor": "∨",
    # Dots and spacing
    "ldots": "…", "cdots": "⋯", "dots": "…",
    ",": " ", ";": " ", ":": " ", "!": "", "quad": " ", "qquad": "  ",
    # Delimiters
    "{": "{", "}": "}", "langle": "⟨", "rangle": "⟩", "|": "‖",
    "lfloor": "⌊", "rfloor": "⌋", "lceil": "⌈", "rceil": "⌉",
    # Functions
    "sin": "sin", "cos": "cos", "tan": "tan", "log": "log", "ln": "ln",
    "exp": "exp", "lim": "lim", "max": "max", "min": "min", "det": "det",
}

BLACKBOARD = {"R": "ℝ", "N": "ℕ", "Z": "ℤ", "Q": "ℚ", "C": "ℂ"}

# Commands that only affect sizing or style; their argument is kept
TRANSPARENT_COMMANDS = {"text", "mathrm", "mathbf", "mathit", "operatorname", "textbf", "boldsymbol"}
IGNORED_COMMANDS = {"left", "right", "displaystyle", "big", "Big", "bigg", "Bigg"}

SUPERSCRIPTS = str.maketrans("0123456789+-=()niax", "⁰¹²³⁴⁵⁶⁷⁸⁹⁺⁻⁼⁽⁾ⁿⁱᵃˣ")
SUBSCRIPTS = str.maketrans("0123456789+-=()aeiox", "₀₁₂₃₄₅₆₇₈₉₊₋₌₍₎ₐₑᵢₒₓ")
SUPERSCRIPT_CHARS = set("0123456789+-=()niax")
SUBSCRIPT_CHARS = set("0123456789+-=()aeiox")


@dataclass(frozen=True)
class MathSpan:
    """A math span inside message text."""

    start: int
    end: int
    source: str
    display: bool


def find_math_spans(text: str) -> List[MathSpan]:
    """
    Find $...$ and $$...$$ spans in text.

    Examples:
        >>> [s.source for s in find_math_spans("so $x^2$ and $$y$$")]
        ['x^2', 'y']
    """
    spans = []
    for match in MATH_PATTERN.finditer(text):
        display = match.group("display") is not None
        source = match.group("display") if display else match.group("inline")
        spans.append(MathSpan(match.start(), match.end(), source.strip(), display))
    return spans


class _TexReader:
    """Single-pass reader converting a TeX math string to Unicode."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def error(self, reason: str) -> FormulaRenderingError:
        return FormulaRenderingError(self.source, reason)

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def read_group(self) -> str:
        """Read a {...} group or a single token and return it rendered."""
        self.skip_spaces()
        if self.at_end():
            raise self.error("missing argument")
        char = self.source[self.pos]
        if char == "{":
            depth = 0
            start = self.pos + 1
            while not self.at_end():
                current = self.source[self.pos]
                if current == "{":
                    depth += 1
                elif current == "}":
                    depth -= 1
                    if depth == 0:
                        inner = self.source[start:self.pos]
                        self.pos += 1
                        return _TexReader(inner).render()
                self.pos += 1
            raise self.error("unbalanced braces")
        if char == "\\":
            return self.read_command()
        self.pos += 1
        return char

    def read_raw_group(self) -> str:
        """Read a {...} group verbatim (used for \\mathbb)."""
        self.skip_spaces()
        if self.at_end() or self.source[self.pos] != "{":
            return self.read_group()
        end = self.source.find("}", self.pos)
        if end < 0:
            raise self.error("unbalanced braces")
        raw = self.source[self.pos + 1:end]
        self.pos = end + 1
        return raw

    def skip_spaces(self):
        while not self.at_end() and self.source[self.pos] == " ":
            self.pos += 1

    def read_command(self) -> str:
        self.pos += 1  # backslash
        if self.at_end():
            raise self.error("dangling backslash")
        match = re.match(r"[A-Za-z]+", self.source[self.pos:])
        if match:
            name = match.group(0)
            self.pos += len(name)
        else:
            name = self.source[self.pos]
            self.pos += 1

        if name in IGNORED_COMMANDS:
            return ""
        if name in TRANSPARENT_COMMANDS:
            return self.read_group()
        if name == "frac":
            numerator = self.read_group()
            denominator = self.read_group()
            return f"{_wrap(numerator)}/{_wrap(denominator)}"
        if name == "sqrt":
            return f"√{_wrap(self.read_group())}"
        if name == "mathbb":
            raw = self.read_raw_group()
            return "".join(BLACKBOARD.get(char, char) for char in raw)
        if name in SYMBOLS:
            return SYMBOLS[name]
        raise self.error(f"unsupported command \\{name}")

    def render(self) -> str:
        parts = []
        while not self.at_end():
            char = self.source[self.pos]
            if char == "\\":
                parts.append(self.read_command())
            elif char in "^_":
                self.pos += 1
                parts.append(_script(self.read_group(), superscript=(char == "^")))
            elif char == "{":
                parts.append(self.read_group())
            elif char == "}":
                raise self.error("unbalanced braces")
            else:
                parts.append(char)
                self.pos += 1
        return "".join(parts)


def _wrap(text: str) -> str:
    """Parenthesize compound operands of / and √."""
    return text if len(text) <= 1 or text.isalnum() else f"({text})"


def _script(text: str, superscript: bool) -> str:
    allowed = SUPERSCRIPT_CHARS if superscript else SUBSCRIPT_CHARS
    if text and all(char in allowed for char in text):
        return text.translate(SUPERSCRIPTS if superscript else SUBSCRIPTS)
    marker = "^" if superscript else "_"
    return f"{marker}{_wrap(text)}"


class FormulaRenderer:
    """Renders TeX math spans to Unicode text.

    Attributes:
        mono_font_path: TrueType face the rasterizer uses for formula runs
                        (None for Pillow's built-in face)
    """

    def __init__(self, mono_font_path: Optional[str] = None):
        self.mono_font_path = mono_font_path

    def is_available(self) -> bool:
        """True if the face used for formula runs can be loaded."""
        if self.mono_font_path is None:
            return True
        try:
            ImageFont.truetype(self.mono_font_path, 16)
            return True
        except OSError as e:
            print(f"Warning: Formula font unavailable ({self.mono_font_path}): {e}")
            return False

    def render(self, math_source: str) -> str:
        """
        Render TeX source to Unicode.

        Args:
            math_source: TeX without the $ delimiters

        Returns:
            Rendered text, e.g. "x²+y²" for "x^2+y^2"

        Raises:
            FormulaRenderingError: On unsupported commands or malformed input
        """
        source = " ".join(math_source.split())
        if not source:
            raise FormulaRenderingError(math_source, "empty formula")
        return _TexReader(source).render().strip()

    def render_segments(self, text: str) -> Tuple[Tuple[TextSegment, ...], List[str]]:
        """
        Split text into plain and formula segments, rendering each math span.

        A span that fails to render stays in the text as written and a
        diagnostic is returned for it.

        Args:
            text: Message text

        Returns:
            Tuple of (segments, diagnostics)
        """
        segments = []
        diagnostics = []
        cursor = 0
        for span in find_math_spans(text):
            if span.start > cursor:
                segments.append(TextSegment(text[cursor:span.start]))
            original = text[span.start:span.end]
            try:
                segments.append(TextSegment(self.render(span.source), is_formula=True, source=span.source))
            except FormulaRenderingError as e:
                print(f"Warning: {e}")
                diagnostics.append(str(e))
                segments.append(TextSegment(original))
            cursor = span.end
        if cursor < len(text):
            segments.append(TextSegment(text[cursor:]))
        return tuple(segments), diagnostics
