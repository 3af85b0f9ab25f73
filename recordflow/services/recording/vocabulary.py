"""
Recognition vocabulary and detector tuning.

The keyword tables are data: the defaults describe a typical HR back-office
application and can be replaced per deployment (see ``Settings.VOCABULARY``).
"""
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RecognitionVocabulary(BaseModel):
    """Keyword tables used by pattern detection, context inference and naming"""

    # Application modules reachable from the main navigation
    module_keywords: List[str] = Field(default_factory=lambda: [
        "Admin", "PIM", "Leave", "Time", "Recruitment",
        "Performance", "Dashboard", "Directory", "Maintenance",
    ])
    # URL path fragments that identify the login screen
    login_url_markers: List[str] = Field(default_factory=lambda: ["/login", "/auth"])

    username_keywords: List[str] = Field(default_factory=lambda: ["username", "user name", "email"])
    password_keywords: List[str] = Field(default_factory=lambda: ["password"])
    login_button_keywords: List[str] = Field(default_factory=lambda: ["login", "log in", "sign in"])
    remember_me_keywords: List[str] = Field(default_factory=lambda: ["remember"])
    search_keywords: List[str] = Field(default_factory=lambda: ["search"])

    # Dialog text that asks the user to confirm something
    dialog_keywords: List[str] = Field(default_factory=lambda: ["will be", "confirm", "sure", "delete"])
    confirm_keywords: List[str] = Field(default_factory=lambda: ["confirm", "yes", "ok"])
    cancel_keywords: List[str] = Field(default_factory=lambda: ["cancel", "no"])

    # Selector fragments that mark a custom dropdown trigger
    dropdown_trigger_markers: List[str] = Field(default_factory=lambda: ["select", "icon", "dropdown"])
    dropdown_trigger_roles: List[str] = Field(default_factory=lambda: ["listbox", "combobox"])
    # Option text hint -> field the dropdown filters on, checked in order
    dropdown_option_hints: Dict[str, str] = Field(default_factory=lambda: {
        "enable": "Status",
        "disable": "Status",
        "employee": "Employment Status",
        "admin": "User Role",
        "role": "User Role",
    })
    # Selector keyword -> field the dropdown filters on
    dropdown_selector_hints: Dict[str, str] = Field(default_factory=lambda: {
        "status": "Status",
        "role": "Role",
        "type": "Type",
    })
    default_dropdown_field: str = "Filter"

    # Class names generated by CSS frameworks; unstable across builds
    utility_class_markers: List[str] = Field(default_factory=lambda: [".css-", ".oxd-"])

    # Button names worth materializing even when used once
    important_button_keywords: List[str] = Field(default_factory=lambda: [
        "save", "submit", "login", "search", "delete", "add", "cancel", "confirm",
    ])
    # Button name keyword -> purpose of a click outside any pattern, checked in order
    button_purposes: Dict[str, str] = Field(default_factory=lambda: {
        "search": "execute search",
        "save": "save changes",
        "delete": "delete record",
        "cancel": "cancel operation",
        "submit": "submit form",
        "login": "submit login",
    })

    @staticmethod
    def mentions(text: Optional[str], keywords: List[str]) -> bool:
        """Case-insensitive substring match against any keyword."""
        if not text:
            return False
        lowered = text.lower()
        return any(keyword.lower() in lowered for keyword in keywords)

    @staticmethod
    def mentions_word(text: Optional[str], keywords: List[str]) -> bool:
        """Case-insensitive whole-word match against any keyword."""
        if not text:
            return False
        lowered = text.lower()
        return any(re.search(rf"\b{re.escape(keyword.lower())}\b", lowered) for keyword in keywords)

    def module_in(self, text: Optional[str]) -> Optional[str]:
        """First module keyword contained in ``text``, in vocabulary order."""
        if not text:
            return None
        lowered = text.lower()
        for module in self.module_keywords:
            if module.lower() in lowered:
                return module
        return None


class DetectorTuning(BaseModel):
    """Forward-scan windows and confidences of the pattern detectors"""

    login_window: int = 6
    modal_window: int = 5
    search_window: int = 10

    dropdown_confidence: float = 0.95
    modal_confidence: float = 0.9
    login_confidence: float = 1.0
    search_confidence: float = 0.85
    navigation_confidence: float = 0.95

    max_alternatives: int = 4
