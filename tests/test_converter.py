"""
End-to-end tests for the recording converter and architecture organizer.

Run with:
    pytest tests/test_converter.py -v
"""
import json

import pytest

from recordflow.services.recording import ParseError, RecordingConverter, convert_recording
from recordflow.services.recording.types import OmissionKind, PatternType
from recordflow.services.recording.vocabulary import DetectorTuning, RecognitionVocabulary


def _all_elements(architecture):
    elements = [e for page in architecture.page_groupings for e in page.elements]
    if architecture.shared_navigation is not None:
        elements.extend(architecture.shared_navigation.elements)
    return elements


def test_login_recording_builds_login_page(login_recording):
    result = convert_recording(login_recording)
    architecture = result.architecture

    assert architecture.shared_navigation is None
    assert [page.module for page in architecture.page_groupings] == ["Login"]

    page = architecture.grouping("Login")
    assert page.class_name == "LoginPage"
    assert [e.name for e in page.elements] == ["usernameField", "passwordField", "loginButton", "pageHeading"]
    assert [m.name for m in page.methods] == ["loginAs", "verifyLoginElements"]

    login = page.methods[0]
    assert login.pattern_type == PatternType.LOGIN
    assert [p.name for p in login.parameters] == ["username", "password"]
    assert login.action_ids == ["action_1", "action_2", "action_3"]
    assert login.step_text == 'Given I am logged in as "Admin"'


def test_navigation_links_live_only_in_shared_component(navigation_recording):
    """Admin and PIM links belong to the shared component and no page grouping"""
    architecture = convert_recording(navigation_recording).architecture
    navigation = architecture.shared_navigation

    assert [e.name for e in navigation.elements] == ["adminLink", "pimLink"]
    assert [m.name for m in navigation.methods] == ["navigateToModule"]
    assert navigation.methods[0].parameters[0].allowed_values == ("Admin", "PIM")

    link_ids = {action_id for e in navigation.elements for action_id in e.action_ids}
    assert link_ids == {"action_1", "action_5"}

    assert [page.module for page in architecture.page_groupings] == ["Admin", "PIM"]
    for page in architecture.page_groupings:
        for element in page.elements:
            assert not link_ids.intersection(element.action_ids)
            assert element.descriptor.value != "link"


def test_same_names_allowed_across_modules(navigation_recording):
    architecture = convert_recording(navigation_recording).architecture

    assert "searchButton" in [e.name for e in architecture.grouping("Admin").elements]
    assert "searchButton" in [e.name for e in architecture.grouping("PIM").elements]
    assert [m.name for m in architecture.grouping("PIM").methods] == ["searchByTypeForHints"]


def test_names_unique_within_each_module(navigation_recording, login_recording, modal_recording, module_recording):
    for recording in (navigation_recording, login_recording, modal_recording, module_recording):
        architecture = convert_recording(recording).architecture
        for page in architecture.page_groupings:
            element_names = [e.name for e in page.elements]
            method_names = [m.name for m in page.methods]
            assert len(element_names) == len(set(element_names))
            assert len(method_names) == len(set(method_names))


def test_every_element_in_exactly_one_grouping(navigation_recording, modal_recording):
    for recording in (navigation_recording, modal_recording):
        architecture = convert_recording(recording).architecture
        seen = set()
        for element in _all_elements(architecture):
            key = tuple(element.action_ids)
            assert key not in seen
            seen.add(key)


def test_stability_and_alternative_bounds(navigation_recording, login_recording, modal_recording):
    for recording in (navigation_recording, login_recording, modal_recording):
        for element in _all_elements(convert_recording(recording).architecture):
            locators = element.locators
            assert 0 < locators.stability_score <= 100
            assert len(locators.alternatives) <= 4
            assert all(alt.stability <= locators.stability_score for alt in locators.alternatives)


def test_dropdown_and_search_methods(module_recording):
    page = convert_recording(module_recording).architecture.grouping("Admin")

    assert [m.name for m in page.methods] == ["selectFromStatusDropdown", "performSearch"]
    dropdown = page.methods[0]
    assert dropdown.parameters[0].name == "status"
    assert dropdown.parameters[0].default == "Enabled"
    assert dropdown.step_text == 'When I filter by "Enabled" status'
    assert {"statusFilterDropdown", "searchButton", "resultsTable"} <= {e.name for e in page.elements}


def test_modal_method_and_confirmation_message(modal_recording):
    page = convert_recording(modal_recording).architecture.grouping("Admin")
    methods = {m.name: m for m in page.methods}

    assert methods["confirmAction"].step_text == "When I confirm the action"
    assert methods["confirmAction"].action_ids == ["action_2", "action_3"]
    assert "confirmationMessage" in [e.name for e in page.elements]


def test_step_bindings_cover_every_method(navigation_recording):
    architecture = convert_recording(navigation_recording).architecture
    bindings = {(b.module, b.method) for b in architecture.step_bindings}

    assert ("NavigationComponent", "navigateToModule") in bindings
    for page in architecture.page_groupings:
        for method in page.methods:
            assert (page.module, method.name) in bindings


def test_unknown_module_elements_are_omitted():
    source = "await page.getByRole('button', { name: 'Save' }).click();"
    architecture = convert_recording(source).architecture

    assert architecture.page_groupings == []
    assert [(o.kind, o.subject) for o in architecture.omissions] == [
        (OmissionKind.UNASSIGNED_MODULE, "saveButton"),
    ]


def test_unresolved_verification_is_reported():
    source = (
        "await page.goto('https://x.test/web/index.php/dashboard/index');\n"
        "await expect(page).toHaveURL(/dashboard/);\n"
    )
    architecture = convert_recording(source).architecture

    assert [o.kind for o in architecture.omissions] == [OmissionKind.UNRESOLVED_LOCATOR]


def test_parse_failure_raises():
    with pytest.raises(ParseError):
        convert_recording("await page.getByText('Oops'.click();")


def test_conversion_is_idempotent(navigation_recording, modal_recording):
    """Identical input gives a structurally identical artifact graph"""
    converter = RecordingConverter()
    for recording in (navigation_recording, modal_recording):
        first = converter.convert(recording).to_dict()
        second = converter.convert(recording).to_dict()
        third = RecordingConverter().convert(recording).to_dict()
        assert first == second == third


def test_json_output(login_recording):
    payload = json.loads(RecordingConverter().convert_to_json(login_recording))

    assert set(payload) == {"patterns", "architecture"}
    page = payload["architecture"]["pageGroupings"][0]
    assert page["className"] == "LoginPage"
    assert page["elements"][0]["locators"]["primary"]["type"] == "placeholder"
    assert payload["patterns"][0]["type"] == "login"


def test_injected_vocabulary_and_tuning():
    source = (
        "await page.getByRole('link', { name: 'Billing' }).click();\n"
        "await page.getByPlaceholder('Invoice Number').fill('INV-1');\n"
        "await page.getByRole('button', { name: 'Search' }).click();\n"
    )
    converter = RecordingConverter(
        vocabulary=RecognitionVocabulary(module_keywords=["Billing"]),
        tuning=DetectorTuning(search_confidence=0.5),
    )
    result = converter.convert(source)

    assert [e.name for e in result.architecture.shared_navigation.elements] == ["billingLink"]
    assert [p.module for p in result.architecture.page_groupings] == ["Billing"]
    search = [p for p in result.patterns if p.type == PatternType.SEARCH][0]
    assert search.confidence == 0.5


def test_validate_recording(login_recording):
    converter = RecordingConverter()

    assert converter.validate_recording(login_recording) == {"valid": True, "actionCount": 5, "errors": []}
    invalid = converter.validate_recording("await page.click(")
    assert invalid["valid"] is False
    assert invalid["errors"][0].startswith("Parse error at line")


def test_case_variant_module_links_get_distinct_names():
    source = (
        "await page.getByRole('link', { name: 'Admin' }).click();\n"
        "await page.getByRole('link', { name: 'ADMIN' }).click();\n"
    )
    navigation = convert_recording(source).architecture.shared_navigation

    assert [e.name for e in navigation.elements] == ["adminLink", "adminLink2"]
    assert navigation.methods[0].parameters[0].allowed_values == ("Admin", "ADMIN")


def test_verified_module_link_stays_in_navigation_component():
    """Assertions on a module link do not copy the link into a page grouping"""
    source = (
        "await page.getByRole('link', { name: 'Admin' }).click();\n"
        "await expect(page.getByRole('link', { name: 'Admin' })).toBeVisible();\n"
        "await page.getByRole('link', { name: 'PIM' }).click();\n"
    )
    architecture = convert_recording(source).architecture
    navigation_targets = {e.descriptor.identity() for e in architecture.shared_navigation.elements}

    assert ("role", "link", "Admin") in navigation_targets
    for page in architecture.page_groupings:
        for element in page.elements:
            assert element.descriptor.identity() not in navigation_targets


def test_degenerate_locator_is_omitted():
    source = (
        "await page.goto('https://x.test/web/index.php/admin/viewSystemUsers');\n"
        "await expect(page.locator('')).toBeVisible();\n"
    )
    architecture = convert_recording(source).architecture

    assert [o.kind for o in architecture.omissions] == [OmissionKind.DEGENERATE_LOCATOR]
    assert all(not page.elements for page in architecture.page_groupings)


def test_exhausted_names_are_omitted():
    """Four headings sharing a name hint fill every naming tier"""
    source = (
        "await page.goto('https://x.test/web/index.php/admin/viewSystemUsers');\n"
        "await expect(page.getByRole('heading', { name: 'User Management' })).toBeVisible();\n"
        "await expect(page.getByRole('heading', { name: 'User-Management' })).toBeVisible();\n"
        "await expect(page.getByRole('heading', { name: 'User Management!' })).toBeVisible();\n"
        "await expect(page.getByRole('heading', { name: 'User_Management' })).toBeVisible();\n"
    )
    architecture = convert_recording(source).architecture

    assert [e.name for e in architecture.grouping("Admin").elements] == [
        "pageHeading", "adminPageHeading", "pageHeadingUserManagement",
    ]
    assert [o.kind for o in architecture.omissions] == [OmissionKind.NAME_COLLISION_EXHAUSTED]
