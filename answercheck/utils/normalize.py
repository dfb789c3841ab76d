# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""String conversion functions (keyboard LaTeX -> plain infix)

The math keyboard produces a mix of LaTeX markup, unicode operators and plain
ascii. normalize() rewrites all of it into the infix syntax read by
answercheck.utils.expression. It never raises; text it cannot interpret is
returned with only its whitespace tidied.
"""

import logging
import re

logger = logging.getLogger(__name__)

UNICODE_SUBS = {
    "\u2212": "-",  # minus sign
    "\u2013": "-",
    "\u00d7": "*",
    "\u22c5": "*",
    "\u00b7": "*",
    "\u00f7": "/",
    "\u2215": "/",
    "\u03c0": "pi",
    "\u221a": "sqrt",
}

SUPERSCRIPTS = {
    "\u2070": "0",
    "\u00b9": "1",
    "\u00b2": "2",
    "\u00b3": "3",
    "\u2074": "4",
    "\u2075": "5",
    "\u2076": "6",
    "\u2077": "7",
    "\u2078": "8",
    "\u2079": "9",
}

LATEX_SUBS = [
    (r"\\left\s*([(\[|])", r"\1"),
    (r"\\right\s*([)\]|])", r"\1"),
    (r"\\(cdot|times|ast)(?![A-Za-z])", "*"),
    (r"\\div(?![A-Za-z])", "/"),
    (r"\\pi(?![A-Za-z])", "pi"),
    (r"\\(,|;|:|!| )", " "),
    (r"\\(mathrm|text|operatorname)\s*\{([^{}]*)\}", r"\2"),
]

FRACTIONS = ("\\dfrac", "\\tfrac", "\\frac")


class _Unresolved(Exception):
    pass


def index_of_matching_right(text, beg, left="{", right="}"):
    """
    Index just past the bracket closing the one at text[beg], or None if unbalanced.
    """
    level = 1
    ind = beg + 1
    while level > 0 and ind < len(text):
        if text[ind] == right:
            level = level - 1
        elif text[ind] == left:
            level = level + 1
        ind = ind + 1
    if level > 0:
        return None
    return ind


def _read_argument(text, pos):
    # A LaTeX argument is a {group} or a single character, e.g. \frac34
    while pos < len(text) and text[pos] == " ":
        pos = pos + 1
    if pos >= len(text):
        raise _Unresolved(text)
    if text[pos] == "{":
        end = index_of_matching_right(text, pos)
        if end is None:
            raise _Unresolved(text)
        return text[pos + 1 : end - 1], end
    if text[pos].isalnum():
        return text[pos], pos + 1
    raise _Unresolved(text)


def _rewrite_commands(text):
    # Arguments are rewritten recursively, so nested \frac and \sqrt resolve.
    out = []
    pos = 0
    while pos < len(text):
        if text.startswith("\\", pos):
            frac = next((f for f in FRACTIONS if text.startswith(f, pos)), None)
            if frac is not None:
                num, pos = _read_argument(text, pos + len(frac))
                den, pos = _read_argument(text, pos)
                out.append("(%s)/(%s)" % (_rewrite_commands(num), _rewrite_commands(den)))
                continue
            if text.startswith("\\sqrt", pos):
                pos = pos + len("\\sqrt")
                index = None
                if pos < len(text) and text[pos] == "[":
                    end = index_of_matching_right(text, pos, "[", "]")
                    if end is None:
                        raise _Unresolved(text)
                    index = text[pos + 1 : end - 1]
                    pos = end
                radicand, pos = _read_argument(text, pos)
                radicand = _rewrite_commands(radicand)
                if index is None:
                    out.append("sqrt(%s)" % radicand)
                else:
                    out.append("((%s)^(1/(%s)))" % (radicand, _rewrite_commands(index)))
                continue
        if text.startswith("^{", pos):
            end = index_of_matching_right(text, pos + 1)
            if end is None:
                raise _Unresolved(text)
            exponent = _rewrite_commands(text[pos + 2 : end - 1]).strip()
            if re.fullmatch(r"[0-9]+|[A-Za-z]", exponent):
                out.append("^" + exponent)
            else:
                out.append("^(%s)" % exponent)
            pos = end
            continue
        out.append(text[pos])
        pos = pos + 1
    return "".join(out)


def _superscripts(text):
    return re.sub(
        "[%s]+" % "".join(SUPERSCRIPTS),
        lambda m: "^" + "".join(SUPERSCRIPTS[c] for c in m.group(0)),
        text,
    )


def collapse_whitespace(text):
    return re.sub(r"\s+", " ", text).strip()


def normalize(raw):
    if raw is None:
        return ""
    text = collapse_whitespace(str(raw))
    untouched = text
    for key, val in UNICODE_SUBS.items():
        text = text.replace(key, val)
    text = _superscripts(text)
    for pattern, replacement in LATEX_SUBS:
        text = re.sub(pattern, replacement, text)
    try:
        text = _rewrite_commands(text)
    except (_Unresolved, RecursionError):
        logger.debug(f"NORMALIZE could not rewrite markup in {untouched!r}")
        return untouched
    text = text.replace("{", "(").replace("}", ")")
    text = text.replace("**", "^")
    text = re.sub(r"\+\s*-", "-", text)
    text = re.sub(r"-\s*\+", "-", text)
    text = re.sub(r"^\+\s*", "", text.strip())
    return collapse_whitespace(text)


def textual_form(text):
    """
    Whitespace free, lower case form used only for textual comparisons.
    """
    return re.sub(r"\s+", "", normalize(text)).lower()
