"""Shared fixtures: sample recordings and an Action factory."""
import pytest

from recordflow.services.recording.types import Action, ActionType, LocatorDescriptor, LocatorKind


LOGIN_RECORDING = """\
await page.goto('https://opensource-demo.orangehrmlive.com/web/index.php/auth/login');
await page.getByPlaceholder('Username').fill('Admin');
await page.getByPlaceholder('Password').fill('admin123');
await page.getByRole('button', { name: 'Login' }).click();
await expect(page.getByRole('heading', { name: 'Dashboard' })).toBeVisible();
"""

NAVIGATION_RECORDING = """\
await page.goto('https://opensource-demo.orangehrmlive.com/web/index.php/dashboard/index');
await page.getByRole('link', { name: 'Admin' }).click();
await expect(page.getByRole('heading', { name: 'User Management' })).toBeVisible();
await page.getByRole('textbox').nth(1).fill('jane');
await page.getByRole('button', { name: 'Search' }).click();
await page.getByRole('link', { name: 'PIM' }).click();
await page.getByPlaceholder('Type for hints...').first().fill('Peter');
await page.getByRole('button', { name: 'Search' }).click();
"""

MODAL_RECORDING = """\
await page.goto('https://opensource-demo.orangehrmlive.com/web/index.php/admin/viewSystemUsers');
await page.getByRole('row', { name: 'John Smith' }).getByRole('button').first().click();
await expect(page.getByText('The selected record will be permanently deleted. Are you sure you want to continue?')).toBeVisible();
await page.getByRole('button', { name: 'Yes, Delete' }).click();
await expect(page.getByText('Successfully Deleted')).toBeVisible();
"""

MODULE_RECORDING = """\
import { test, expect } from '@playwright/test';

test('filter users', async ({ page }) => {
  await page.goto('https://opensource-demo.orangehrmlive.com/web/index.php/admin/viewSystemUsers');
  await page.getByText('-- Select --').first().click();
  await page.getByRole('option', { name: 'Enabled' }).click();
  await page.getByRole('button', { name: 'Search' }).click();
  await expect(page.getByRole('table')).toBeVisible();
});
"""


@pytest.fixture
def login_recording():
    return LOGIN_RECORDING


@pytest.fixture
def navigation_recording():
    return NAVIGATION_RECORDING


@pytest.fixture
def modal_recording():
    return MODAL_RECORDING


@pytest.fixture
def module_recording():
    return MODULE_RECORDING


@pytest.fixture
def make_action():
    """Factory building Actions without parsing; index doubles as id suffix."""
    def _make(index, action_type, method="click", kind=None, value="", name=None, args=()):
        target = None
        if kind is not None:
            target = LocatorDescriptor(kind=LocatorKind(kind), value=value, name=name)
        return Action(
            id=f"action_{index}",
            index=index,
            type=ActionType(action_type),
            method=method,
            target=target,
            args=tuple(args),
        )
    return _make
