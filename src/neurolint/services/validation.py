"""Validation gate applied to every layer output.

A layer's output is accepted only if:

1. its ``change_count`` is consistent with what it returned (zero changes
   means byte-identical code, and vice versa);
2. the code is still structurally sound: strings, template literals,
   comments and ``() [] {}`` pairs all close (see :func:`scan_structure`);
3. it did not introduce a known corruption pattern;
4. it did not drop critical React imports.

The structural scan is a single pass over JS/TS/JSX text.  It is not a
parser; it only answers "would a parser choke on unbalanced structure".
When the input was already unbalanced, the output is held to "no worse than
before" instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from neurolint.domain.enums import ErrorCategory

logger = logging.getLogger(__name__)

INVALID_OUTPUT = "invalid-output"

# ---------------------------------------------------------------------------
# Structural scan
# ---------------------------------------------------------------------------

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}
_TEMPLATE_EXPR = "${"
_JSX_EXPR = "jsx{"
_ELEMENT = "<"

# Characters after which a ``/`` starts a regex literal rather than a division,
# and a ``<`` followed by a name starts a JSX element rather than a comparison.
_REGEX_PRECEDERS = set("([{,;:=!&|?+-*%~^")
_REGEX_KEYWORDS = frozenset({
    "return", "typeof", "case", "in", "of", "delete", "void",
    "throw", "new", "else", "yield", "await",
})
_ARROW = "=>"
_TAG_NAME_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$.:-")

_JS = "js"
_TEMPLATE = "template"
_TAG = "tag"
_CHILDREN = "children"


@dataclass(frozen=True)
class StructuralIssue:
    kind: str
    line: int
    detail: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.detail}"


def _shown(opener: str, extra: str) -> str:
    if opener == _ELEMENT:
        return f"<{extra}>"
    if opener == _JSX_EXPR:
        return "'{'"
    return f"'{opener}'"


def _expected(opener: str, extra: str) -> str:
    if opener == _ELEMENT:
        return f"</{extra}>"
    if opener in (_TEMPLATE_EXPR, _JSX_EXPR):
        return "'}'"
    return f"'{_OPENERS[opener]}'"


class _StructureScanner:
    """Single pass over JS/TS/JSX text in one of four modes.

    ``js`` is ordinary code, ``template`` the literal part of a template
    string, ``tag`` the inside of a JSX tag and ``children`` the text
    between JSX tags.  Every open bracket, ``${``, JSX ``{`` and element
    is a stack frame ``(opener, line, extra)`` where *extra* is the mode to
    resume after a JSX ``{...}`` or the name of an element.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        self.n = len(code)
        self.i = 0
        self.line = 1
        self.mode = _JS
        self.stack: list[tuple[str, int, str]] = []
        self.issues: list[StructuralIssue] = []
        self.prev_sig = ""  # last significant token outside literals/comments
        self.prev_word = ""  # last identifier, for keyword detection
        self.tag_name = ""
        self.tag_closing = False
        self.tag_line = 1

    def run(self) -> list[StructuralIssue]:
        steps = {
            _JS: self._step_js,
            _TEMPLATE: self._step_template,
            _TAG: self._step_tag,
            _CHILDREN: self._step_children,
        }
        while self.i < self.n:
            if not steps[self.mode]():
                break

        if self.mode == _TEMPLATE:
            self._issue("template", self.line, "unterminated template literal")
        elif self.mode == _TAG:
            self._issue("jsx", self.tag_line, f"unterminated JSX tag <{self.tag_name}")
        for opener, open_line, extra in self.stack:
            kind = "jsx" if opener == _ELEMENT else "bracket"
            self._issue(kind, open_line, f"unclosed {_shown(opener, extra)}")
        return self.issues

    # -- helpers -----------------------------------------------------------

    def _issue(self, kind: str, line: int, detail: str) -> None:
        self.issues.append(StructuralIssue(kind, line, detail))

    def _expression_start(self) -> bool:
        return (
            self.prev_sig in ("", _ARROW)
            or self.prev_sig in _REGEX_PRECEDERS
            or self.prev_word in _REGEX_KEYWORDS
        )

    def _starts_element(self, i: int) -> bool:
        nxt = self.code[i + 1] if i + 1 < self.n else ""
        return nxt.isalpha() or nxt in "_$>"

    def _open_tag(self) -> None:
        j = self.i + 1
        self.tag_closing = self.code.startswith("/", j)
        if self.tag_closing:
            j += 1
        k = j
        while k < self.n and self.code[k] in _TAG_NAME_CHARS:
            k += 1
        self.tag_name = self.code[j:k]
        self.tag_line = self.line
        self.mode = _TAG
        self.i = k

    def _after_element(self) -> None:
        if self.stack and self.stack[-1][0] == _ELEMENT:
            self.mode = _CHILDREN
        else:
            self.mode = _JS
            self.prev_sig, self.prev_word = ")", ""

    def _skip_string(self, quote: str, multiline: bool) -> bool:
        """Advance past the string at ``self.i``; ``False`` if it never closes."""
        code = self.code
        j = self.i + 1
        while j < self.n:
            c = code[j]
            if c == "\\":
                if j + 1 < self.n and code[j + 1] == "\n":
                    self.line += 1
                j += 2
                continue
            if c == quote:
                self.i = j + 1
                return True
            if c == "\n":
                if not multiline:
                    break
                self.line += 1
            j += 1
        self.i = j
        return False

    # -- modes -------------------------------------------------------------

    def _step_template(self) -> bool:
        code, i = self.code, self.i
        ch = code[i]
        if ch == "\\":
            if i + 1 < self.n and code[i + 1] == "\n":
                self.line += 1
            self.i += 2
        elif ch == "`":
            self.mode = _JS
            self.prev_sig, self.prev_word = "`", ""
            self.i += 1
        elif code.startswith(_TEMPLATE_EXPR, i):
            self.stack.append((_TEMPLATE_EXPR, self.line, _TEMPLATE))
            self.mode = _JS
            self.prev_sig, self.prev_word = "{", ""
            self.i += 2
        else:
            if ch == "\n":
                self.line += 1
            self.i += 1
        return True

    def _step_tag(self) -> bool:
        code, i = self.code, self.i
        ch = code[i]
        if ch in "'\"":
            start_line = self.line
            if not self._skip_string(ch, multiline=True):
                self._issue("string", start_line, f"unterminated {ch} attribute")
                return False
        elif ch == "{":
            self.stack.append((_JSX_EXPR, self.line, _TAG))
            self.mode = _JS
            self.prev_sig, self.prev_word = "{", ""
            self.i += 1
        elif code.startswith("/>", i):
            self.i += 2
            self._after_element()
        elif ch == ">":
            self.i += 1
            if not self.tag_closing:
                self.stack.append((_ELEMENT, self.tag_line, self.tag_name))
                self.mode = _CHILDREN
                return True
            if not self.stack or self.stack[-1][0] != _ELEMENT:
                self._issue("jsx", self.tag_line, f"unexpected </{self.tag_name}>")
            else:
                _, open_line, name = self.stack.pop()
                if name != self.tag_name:
                    self._issue(
                        "jsx", self.tag_line,
                        f"</{self.tag_name}> does not match <{name}> opened on line {open_line}",
                    )
            self._after_element()
        else:
            if ch == "\n":
                self.line += 1
            self.i += 1
        return True

    def _step_children(self) -> bool:
        ch = self.code[self.i]
        if ch == "{":
            self.stack.append((_JSX_EXPR, self.line, _CHILDREN))
            self.mode = _JS
            self.prev_sig, self.prev_word = "{", ""
            self.i += 1
        elif ch == "<" and (self.code.startswith("</", self.i) or self._starts_element(self.i)):
            self._open_tag()
        else:
            if ch == "\n":
                self.line += 1
            self.i += 1
        return True

    def _step_js(self) -> bool:
        code, i, n = self.code, self.i, self.n
        ch = code[i]

        if ch == "\n":
            self.line += 1
            self.i += 1
            return True
        if ch in " \t\r\f\v":
            self.i += 1
            return True

        # comments
        if code.startswith("//", i):
            end = code.find("\n", i)
            self.i = n if end == -1 else end
            return True
        if code.startswith("/*", i):
            end = code.find("*/", i + 2)
            if end == -1:
                self._issue("comment", self.line, "unterminated block comment")
                return False
            self.line += code.count("\n", i, end)
            self.i = end + 2
            return True

        # string literals
        if ch in "'\"":
            start_line = self.line
            if not self._skip_string(ch, multiline=False):
                self._issue("string", start_line, f"unterminated {ch} string")
                return True
            self.prev_sig, self.prev_word = ch, ""
            return True

        if ch == "`":
            self.mode = _TEMPLATE
            self.i += 1
            return True

        # regex literals
        if ch == "/" and self._expression_start():
            j = i + 1
            in_class = False
            closed = False
            while j < n:
                c = code[j]
                if c == "\\":
                    j += 2
                    continue
                if c == "\n":
                    break
                if in_class:
                    if c == "]":
                        in_class = False
                elif c == "[":
                    in_class = True
                elif c == "/":
                    closed = True
                    break
                j += 1
            if not closed:
                self._issue("regex", self.line, "unterminated regular expression")
                self.i = j
                return True
            j += 1
            while j < n and (code[j].isalnum() or code[j] == "_"):
                j += 1
            self.i = j
            self.prev_sig, self.prev_word = "/", ""
            return True

        # JSX elements
        if ch == "<" and self._expression_start() and self._starts_element(i):
            self._open_tag()
            return True

        if code.startswith(_ARROW, i):
            self.prev_sig, self.prev_word = _ARROW, ""
            self.i += 2
            return True

        # brackets
        if ch in _OPENERS:
            self.stack.append((ch, self.line, ""))
        elif ch in _CLOSERS:
            if not self.stack:
                self._issue("bracket", self.line, f"unexpected '{ch}'")
            else:
                opener, open_line, extra = self.stack.pop()
                if ch == "}" and opener in (_TEMPLATE_EXPR, _JSX_EXPR):
                    self.mode = extra
                    self.i += 1
                    return True
                if opener != _CLOSERS[ch]:
                    self._issue(
                        "bracket", self.line,
                        f"'{ch}' does not match {_shown(opener, extra)} opened on line "
                        f"{open_line} (expected {_expected(opener, extra)})",
                    )

        if ch.isalnum() or ch in "_$":
            j = i
            while j < n and (code[j].isalnum() or code[j] in "_$"):
                j += 1
            self.prev_word = code[i:j]
            self.prev_sig = code[j - 1]
            self.i = j
            return True

        self.prev_sig, self.prev_word = ch, ""
        self.i += 1
        return True


def scan_structure(code: str) -> list[StructuralIssue]:
    """Return every structural problem found in *code* (empty list = sound).

    JSX is understood well enough that element text (``<p>Don't</p>``) is
    not read as code; elements must nest and close like brackets.
    """
    return _StructureScanner(code).run()


# ---------------------------------------------------------------------------
# Corruption and import checks
# ---------------------------------------------------------------------------

CORRUPTION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("double arrow event handler", re.compile(r"onClick=\{[^}]*\([^)]*\)\s*=>\s*\(\)\s*=>")),
    ("malformed event handler", re.compile(r"onClick=\{[^}]*\)\([^)]*\)$", re.MULTILINE)),
    ("broken import statement", re.compile(r"import\s*\{\s*\n\s*import\s*\{")),
)

CRITICAL_IMPORTS = ("React", "useState", "useEffect")

_IMPORT_STATEMENT = re.compile(r"import\s+[^;]*?\s+from\s+['\"][^'\"]+['\"]", re.DOTALL)
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


def _imported_names(code: str) -> set[str]:
    names: set[str] = set()
    for statement in _IMPORT_STATEMENT.findall(code):
        clause = statement[len("import"):statement.rfind("from")]
        names.update(_IDENTIFIER.findall(clause))
    return names


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of the gate.  ``reason`` is ``"invalid-output"`` on failure."""

    valid: bool
    reason: str | None = None
    detail: str | None = None
    category: ErrorCategory | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def reject(cls, detail: str, category: ErrorCategory = ErrorCategory.INVALID_OUTPUT) -> ValidationResult:
        return cls(valid=False, reason=INVALID_OUTPUT, detail=detail, category=category)


class StructuralValidator:
    """Accept/revert gate for layer outputs.

    Parameters
    ----------
    strict_change_count:
        Also reject outputs that claim changes but return identical code.
    """

    def __init__(self, strict_change_count: bool = True) -> None:
        self._strict_change_count = strict_change_count

    def validate(self, before: str, after: str, change_count: int) -> ValidationResult:
        if not isinstance(after, str):
            return ValidationResult.reject(
                f"layer returned {type(after).__name__} instead of str"
            )
        if not isinstance(change_count, int) or isinstance(change_count, bool) or change_count < 0:
            return ValidationResult.reject(f"invalid change_count {change_count!r}")
        if change_count == 0:
            if after != before:
                return ValidationResult.reject("reported zero changes but modified the code")
            return ValidationResult.ok()
        if after == before:
            if self._strict_change_count:
                return ValidationResult.reject(
                    f"reported {change_count} changes but returned identical code"
                )
            return ValidationResult.ok()

        after_issues = scan_structure(after)
        if after_issues:
            before_issues = scan_structure(before)
            if not before_issues or len(after_issues) > len(before_issues):
                logger.debug("Structural scan failed: %s", after_issues[0])
                return ValidationResult.reject(
                    f"structural error: {after_issues[0]}", ErrorCategory.SYNTAX
                )

        for name, pattern in CORRUPTION_PATTERNS:
            if pattern.search(after) and not pattern.search(before):
                return ValidationResult.reject(f"corruption detected: {name}")

        removed = _imported_names(before) - _imported_names(after)
        critical = sorted(name for name in removed if name in CRITICAL_IMPORTS)
        if critical:
            return ValidationResult.reject(
                f"critical imports removed: {', '.join(critical)}"
            )

        return ValidationResult.ok()
