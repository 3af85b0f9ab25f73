"""Tests for locator strategy generation and self-healing rendering."""
from recordflow.services.recording.locators import (
    LocatorStrategyGenerator,
    chain_position,
    is_likely_text,
    xpath_literal,
)
from recordflow.services.recording.types import ChainStep, LocatorDescriptor, LocatorKind, StrategyType


def test_test_id_ranks_first(make_action):
    """testId "save-btn" gives a perfect primary and a data-testid CSS alternative"""
    action = make_action(0, "click", kind="testId", value="save-btn")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.TEST_ID
    assert locators.primary.value == "save-btn"
    assert locators.stability_score == 100
    assert any(
        alt.type == StrategyType.CSS and alt.value == '[data-testid="save-btn"]'
        for alt in locators.alternatives
    )


def test_brittle_selector_scores_low(make_action):
    action = make_action(0, "click", kind="rawSelector", value="div > div > ul > li:nth-child(3) > a")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.CSS
    assert locators.stability_score <= 45


def test_role_with_name(make_action):
    action = make_action(0, "click", kind="role", value="button", name="Save")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.ROLE
    assert locators.primary.value == "button:Save"
    assert locators.stability_score == 90
    assert locators.alternatives[0].value == '//*[@role="button"][@aria-label="Save"]'
    assert locators.alternatives[0].stability == 85


def test_bare_role_falls_back_to_attribute_css(make_action):
    action = make_action(0, "fill", kind="role", value="textbox")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.CSS
    assert locators.primary.value == '[role="textbox"]'
    assert locators.stability_score == 60
    assert locators.alternatives == ()


def test_positional_steps_pin_the_match():
    """nth(1) on a bare role is only as stable as an index"""
    descriptor = LocatorDescriptor(
        kind=LocatorKind.ROLE,
        value="textbox",
        chain=(ChainStep("getByRole", ("textbox",)), ChainStep("nth", (1,))),
    )
    locators = LocatorStrategyGenerator().generate_for_descriptor(descriptor)

    assert locators.primary.value == '[role="textbox"] >> nth=1'
    assert locators.stability_score == 25


def test_first_match_gets_indexed_xpath():
    descriptor = LocatorDescriptor(
        kind=LocatorKind.ROLE,
        value="button",
        name="Edit",
        chain=(ChainStep("getByRole", ("button", {"name": "Edit"})), ChainStep("first")),
    )
    locators = LocatorStrategyGenerator().generate_for_descriptor(descriptor)
    values = [s.value for s in (locators.primary,) + locators.alternatives]

    assert locators.primary.type == StrategyType.XPATH
    assert locators.stability_score == 20
    assert '(//*[@role="button"][@aria-label="Edit"])[1]' in values


def test_chain_position():
    assert chain_position((ChainStep("getByText", ("Row",)), ChainStep("last"))) == -1
    assert chain_position((ChainStep("locator", ("tr",)), ChainStep("nth", (2,)))) == 2
    assert chain_position((ChainStep("nth", (2,)), ChainStep("getByRole", ("cell",)))) is None
    assert chain_position(()) is None


def test_placeholder_strategies_in_order(make_action):
    action = make_action(0, "fill", kind="placeholder", value="Username")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.PLACEHOLDER
    assert [alt.stability for alt in locators.alternatives] == [80, 75]
    assert locators.alternatives[0].value == '[placeholder="Username"]'


def test_embedded_id_outranks_recorded_selector(make_action):
    action = make_action(0, "fill", kind="rawSelector", value="form #username")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.CSS
    assert locators.primary.value == "#username"
    assert locators.stability_score == 95
    assert '//*[@id="username"]' in [alt.value for alt in locators.alternatives]


def test_xpath_selector_prefix_is_stripped(make_action):
    action = make_action(0, "click", kind="rawSelector", value="xpath=//table/tbody/tr[2]/td[1]")
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.primary.type == StrategyType.XPATH
    assert locators.primary.value == "//table/tbody/tr[2]/td[1]"
    assert locators.stability_score == 25


def test_utility_classes_are_penalized():
    generator = LocatorStrategyGenerator()

    assert generator.score_selector(".oxd-button") == 35
    assert generator.score_selector("[data-testid='login']") == 95
    assert generator.score_selector("#login") == 90


def test_scores_stay_within_bounds():
    generator = LocatorStrategyGenerator()
    worst = "div:nth-child(2) > .oxd-row .css-1x2 > span[3] > a"

    assert 0 <= generator.score_selector(worst) <= 100
    assert generator.score_selector(worst) == 0


def test_no_target_gives_degenerate_locators(make_action):
    action = make_action(0, "navigation", method="goto", args=("https://a.test/",))
    locators = LocatorStrategyGenerator().generate(action)

    assert locators.is_degenerate
    assert locators.primary.value == "//*"
    assert locators.alternatives == ()


def test_empty_selector_is_degenerate(make_action):
    action = make_action(0, "click", kind="rawSelector", value="   ")
    assert LocatorStrategyGenerator().generate(action).stability_score == 0


def test_alternatives_are_capped(make_action):
    action = make_action(0, "click", kind="rawSelector",
                         value="#main [aria-label='Close'][name='close'][data-testid='close']")
    locators = LocatorStrategyGenerator().generate(action)

    assert len(locators.alternatives) <= 4
    keys = [(s.type, s.value) for s in (locators.primary,) + locators.alternatives]
    assert len(keys) == len(set(keys))


def test_canonical_text_primary_becomes_xpath(make_action):
    generator = LocatorStrategyGenerator()
    locators = generator.generate(make_action(0, "click", kind="text", value="Enabled"))
    canonical = generator.to_canonical(locators)

    assert canonical.primary_type == StrategyType.XPATH
    assert canonical.primary_value == '//*[text()="Enabled" or contains(text(), "Enabled")]'
    assert canonical.alternatives == (
        'xpath://*[text()="Enabled"]',
        'xpath://*[contains(text(), "Enabled")]',
    )


def test_canonical_role_primary(make_action):
    generator = LocatorStrategyGenerator()
    canonical = generator.to_canonical(
        generator.generate(make_action(0, "click", kind="role", value="button", name="Login")))

    assert canonical.primary_value == '//*[@role="button"][@aria-label="Login" or contains(., "Login")]'
    assert all(alt.startswith("xpath:") for alt in canonical.alternatives)


def test_canonical_test_id_keeps_prefixes(make_action):
    generator = LocatorStrategyGenerator()
    canonical = generator.to_canonical(generator.generate(make_action(0, "click", kind="testId", value="save-btn")))

    assert canonical.primary_type == StrategyType.TEST_ID
    assert canonical.alternatives == ('css:[data-testid="save-btn"]',)


def test_is_likely_text():
    assert is_likely_text("Save Changes")
    assert is_likely_text("Dashboard")
    assert not is_likely_text(".btn-primary")
    assert not is_likely_text("div")
    assert not is_likely_text("#id")


def test_xpath_literal_quoting():
    assert xpath_literal("Save") == '"Save"'
    assert xpath_literal('Say "hi"') == "'Say \"hi\"'"
    assert xpath_literal("It's \"fine\"") == "concat(\"It's \", '\"', \"fine\", '\"', \"\")"
