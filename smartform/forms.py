"""
Form collaborators: locating questions, writing answers, review annotations.

The engine only talks to the three protocols below. The Html* classes are
implementations over a BeautifulSoup document shaped like a Google Form
(question roots, a heading per question, text/choice/dropdown widgets).
"""

from typing import Any, List, Protocol, Sequence

import requests
from bs4 import BeautifulSoup

from .errors import NoQuestionsFound
from .logger import get_logger
from .retry import RetryError, exponential_backoff

QUESTION_ROOT_SELECTORS = [
    ".freebirdFormviewerComponentsQuestionBaseRoot",
    'div[role="listitem"]',
]
TITLE_SELECTORS = [
    ".freebirdFormviewerComponentsQuestionBaseTitle",
    ".M7eMe",
    'div[role="heading"]',
]
TEXT_INPUT_SELECTOR = (
    'input[type="text"], input[type="email"], input[type="tel"], '
    'input[aria-label], input:not([type])'
)
OPTION_SELECTOR = '[role="radio"], [role="checkbox"]'
OPTION_TEXT_SELECTOR = (
    ".freebirdFormviewerComponentsQuestionOptionText, .docssharedWizToggleLabeledLabelText"
)

HIGHLIGHT_CLASS = "sfa-suggestion"
PILL_CLASS = "sfa-pill"


class FormInspector(Protocol):
    def list_questions(self) -> Sequence[Any]:
        ...

    def question_label(self, handle: Any) -> str:
        ...


class FieldFiller(Protocol):
    def apply_answer(self, handle: Any, value: str) -> bool:
        ...


class ReviewAnnotator(Protocol):
    def annotate(self, handle: Any, suggested_answer: str) -> None:
        ...

    def clear(self) -> None:
        ...


def parse_form(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _select_any(root, selectors: List[str]):
    for sel in selectors:
        el = root.select_one(sel)
        if el is not None:
            return el
    return None


def _pick_option(labelled, answer: str):
    """Element whose label equals the answer, else the first whose label
    contains or is contained in it (case-insensitive); None if neither or
    if the answer is blank."""
    answer = (answer or "").strip().lower()
    if not answer:
        return None
    loose = None
    for el, label in labelled:
        label = label.strip().lower()
        if not label:
            continue
        if label == answer:
            return el
        if loose is None and (answer in label or label in answer):
            loose = el
    return loose


class HtmlFormInspector:
    """Finds question roots and their headings in a parsed form document."""

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def list_questions(self) -> List[Any]:
        for sel in QUESTION_ROOT_SELECTORS:
            nodes = self.soup.select(sel)
            if nodes:
                return nodes
        return []

    def require_questions(self) -> List[Any]:
        nodes = self.list_questions()
        if not nodes:
            raise NoQuestionsFound("No question elements found; the page structure may have changed")
        return nodes

    def question_label(self, handle) -> str:
        title = _select_any(handle, TITLE_SELECTORS)
        if title is None:
            return ""
        # Skip review pills added by a previous run
        parts = [
            s for s in title.find_all(string=True)
            if s.find_parent(class_=PILL_CLASS) is None
        ]
        return " ".join("".join(parts).split())


class HtmlFormFiller:
    """Writes answers into the widgets of a question root.

    Tries, in order: text input, textarea, radio/checkbox options, native
    select, listbox. Choice widgets are matched by label, exact first.
    """

    def apply_answer(self, handle, value: str) -> bool:
        text_input = handle.select_one(TEXT_INPUT_SELECTOR)
        if text_input is not None:
            text_input["value"] = value
            return True

        textarea = handle.select_one("textarea")
        if textarea is not None:
            textarea.string = value
            return True

        options = handle.select(OPTION_SELECTOR)
        if options:
            labelled = []
            for option in options:
                text_el = option.select_one(OPTION_TEXT_SELECTOR)
                label = text_el.get_text(strip=True) if text_el else option.get("aria-label", "")
                labelled.append((option, label))
            chosen = _pick_option(labelled, value)
            if chosen is not None:
                chosen["aria-checked"] = "true"
                return True

        select = handle.select_one("select")
        if select is not None:
            return self._choose(select.find_all("option"), value, "selected", "selected")

        listbox = handle.select_one('[role="listbox"]')
        if listbox is not None:
            return self._choose(listbox.select('[role="option"]'), value, "aria-selected", "true")

        return False

    @staticmethod
    def _choose(options, value: str, attr: str, on: str) -> bool:
        labelled = [(opt, opt.get_text(strip=True) or opt.get("aria-label", "")) for opt in options]
        chosen = _pick_option(labelled, value)
        if chosen is None:
            return False
        for opt in options:
            if opt.has_attr(attr):
                del opt[attr]
        chosen[attr] = on
        return True


class HtmlReviewAnnotator:
    """Marks suggested answers on the document instead of applying them."""

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def annotate(self, handle, suggested_answer: str) -> None:
        classes = handle.get("class", [])
        if HIGHLIGHT_CLASS not in classes:
            handle["class"] = classes + [HIGHLIGHT_CLASS]
        title = _select_any(handle, TITLE_SELECTORS)
        if title is not None and title.select_one(f".{PILL_CLASS}") is None:
            pill = self.soup.new_tag("span", attrs={"class": PILL_CLASS})
            pill.string = f"Suggested: {suggested_answer}"
            title.append(pill)

    def clear(self) -> None:
        for pill in self.soup.select(f".{PILL_CLASS}"):
            pill.decompose()
        for node in self.soup.select(f".{HIGHLIGHT_CLASS}"):
            node["class"] = [c for c in node.get("class", []) if c != HIGHLIGHT_CLASS]
            if not node["class"]:
                del node["class"]


@exponential_backoff(max_retries=3, base_delay=1.0, exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError))
def _fetch_with_retry(url: str):
    """Fetch URL with automatic retry on transient errors."""
    return requests.get(url, timeout=15)


def fetch_form_html(url: str) -> str:
    """Download a form page.

    Raises:
        ValueError: On any HTTP error, exhausted retries, or request failure
    """
    logger = get_logger()
    try:
        resp = _fetch_with_retry(url)
        resp.raise_for_status()
        return resp.text
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.error("Form request failed", url=url, status=status)
        raise ValueError(f"Form request failed ({status}): {url}")
    except RetryError as e:
        logger.warning("Form request kept failing", url=url, error=str(e))
        raise ValueError(f"Form request failed after retries: {url}")
    except requests.exceptions.RequestException as e:
        logger.error("Form request error", url=url, error=str(e))
        raise ValueError(f"Form request error: {e}")
