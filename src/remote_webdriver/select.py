"""Helper for driving ``<select>`` dropdowns."""

from __future__ import annotations

from typing import Optional

from .element import WebElement
from .errors import WebDriverError
from .models import By


class Select:
    """Wrap a ``<select>`` element and manipulate its options."""

    def __init__(self, element: WebElement) -> None:
        tag_name = element.tag_name()
        if tag_name.lower() != "select":
            raise WebDriverError(f'element should have been "select" but was "{tag_name}"')
        self._element = element
        multiple = element.get_attribute("multiple")
        self._multiple = multiple is not None and multiple.lower() != "false"

    @property
    def element(self) -> WebElement:
        return self._element

    @property
    def is_multiple(self) -> bool:
        return self._multiple

    def options(self) -> list[WebElement]:
        return self._element.find_elements(By.TAG_NAME, "option")

    def all_selected_options(self) -> list[WebElement]:
        return [option for option in self.options() if option.is_selected()]

    def first_selected_option(self) -> WebElement:
        for option in self.options():
            if option.is_selected():
                return option
        raise WebDriverError("no options are selected")

    def select_by_visible_text(self, text: str) -> None:
        """Select every option whose visible text equals *text*, ignoring outer whitespace."""

        options = self._element.find_elements(
            By.XPATH, f".//option[normalize-space(.) = {_xpath_literal(text)}]"
        )
        matched = False
        for option in options:
            self._set_selected(option, True)
            matched = True
            if not self._multiple:
                return

        if not options and " " in text:
            fragment = _longest_word(text)
            if fragment:
                candidates = self._element.find_elements(
                    By.XPATH, f".//option[contains(., {_xpath_literal(fragment)})]"
                )
            else:
                candidates = self.options()
            wanted = text.strip()
            for option in candidates:
                if option.text().strip() == wanted:
                    self._set_selected(option, True)
                    matched = True
                    if not self._multiple:
                        return
        if not matched:
            raise WebDriverError(f"cannot locate option with text: {text}")

    def select_by_value(self, value: str) -> None:
        for option in self._options_by_value(value):
            self._set_selected(option, True)
            if not self._multiple:
                return

    def select_by_index(self, index: int) -> None:
        self._set_selected(self._option_at(index), True)

    def deselect_all(self) -> None:
        self._require_multiple()
        for option in self.options():
            self._set_selected(option, False)

    def deselect_by_value(self, value: str) -> None:
        self._require_multiple()
        for option in self._options_by_value(value):
            self._set_selected(option, False)

    def deselect_by_index(self, index: int) -> None:
        self._require_multiple()
        self._set_selected(self._option_at(index), False)

    def _options_by_value(self, value: str) -> list[WebElement]:
        options = self._element.find_elements(
            By.XPATH, f".//option[@value = {_xpath_literal(value)}]"
        )
        if not options:
            raise WebDriverError(f"cannot locate option with value: {value}")
        return options

    def _option_at(self, index: int) -> WebElement:
        options = self.options()
        if index < 0 or index >= len(options):
            raise WebDriverError(f"cannot locate option with index: {index}")
        return options[index]

    def _require_multiple(self) -> None:
        if not self._multiple:
            raise WebDriverError("you may only deselect options of a multi-select")

    @staticmethod
    def _set_selected(option: WebElement, selected: bool) -> None:
        if option.is_selected() != selected:
            option.click()


def _xpath_literal(text: str) -> str:
    """Quote *text* as an XPath string literal."""

    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    pieces: list[str] = []
    for index, part in enumerate(parts):
        if part:
            pieces.append(f'"{part}"')
        if index < len(parts) - 1:
            pieces.append("'\"'")
    return "concat(" + ", ".join(pieces) + ")"


def _longest_word(text: str) -> Optional[str]:
    longest = ""
    for word in text.split(" "):
        if len(word) > len(longest):
            longest = word
    return longest or None
