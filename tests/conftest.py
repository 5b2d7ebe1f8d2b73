"""Shared fixtures: a small Craft-like project tree."""

from pathlib import Path

import pytest

FIELD_UUID = "0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d"
SECTION_UUID = "11111111-2222-4333-8444-555555555555"
ENTRY_TYPE_UUID = "66666666-7777-4888-9999-aaaaaaaaaaaa"

PHP_MODULE = """<?php

namespace modules;

use Craft;

class Module
{
    public function init()
    {
        echo Craft::t('site', 'Hello');
        echo Craft::t('app', 'foo' . 'bar');
    }
}
"""

FIELD_CONFIG = """name: Headline
handle: headline
instructions: 'Keep it short'
settings:
  placeholder: 'Type a headline'
  options:
    -
      __assoc__:
        -
          - label
          - 'First option'
        -
          - value
          - first
"""

SECTION_CONFIG = """name: News
handle: news
previewTargets:
  -
    __assoc__:
      -
        - label
        - 'Primary entry page'
      -
        - urlFormat
        - '{url}'
"""

ENTRY_TYPE_CONFIG = """name: Article
titleFormat: "{{ 'Untitled'|t }}"
"""


def write(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def craft_project(tmp_path: Path) -> Path:
    """Craft project with templates, PHP, JS, project config and ignored files."""
    root = tmp_path / "project"
    write(root, "templates/index.twig", "{# Home #}\n\n{{ 'Hello'|t }}\n")
    write(root, "templates/_partials/nav.html", '<a>{{ "Home"|translate("app") }}</a>\n')
    write(root, "modules/Module.php", PHP_MODULE)
    write(root, "web/js/app.js", "Craft.t('app', 'Save');\nCraft.t('site', 'Hello');\n")
    write(root, "config/project/project.yaml", "system:\n  name: Demo\n")
    write(root, f"config/project/fields/headline--{FIELD_UUID}.yaml", FIELD_CONFIG)
    write(root, f"config/project/sections/news--{SECTION_UUID}.yaml", SECTION_CONFIG)
    write(root, f"config/project/entryTypes/article--{ENTRY_TYPE_UUID}.yaml", ENTRY_TYPE_CONFIG)

    # Ignored or skipped content
    write(root, ".translateignore", "vendor/\n")
    write(root, "vendor/lib/Lib.php", "<?php echo Craft::t('site', 'Vendor');\n")
    write(root, ".git/hooks/hook.php", "<?php echo Craft::t('site', 'Git');\n")
    write(root, ".cache/app.js", "Craft.t('site', 'Cached');\n")
    write(root, "README.md", "Craft::t('site', 'Readme')\n")
    return root


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear settings overrides from the environment."""
    for name in (
        "CRAFT_TRANSLATIONS_DEFAULT_CATEGORY",
        "CRAFT_TRANSLATIONS_IGNORE_FILENAME",
        "CRAFT_TRANSLATIONS_LOG_LEVEL",
        "CRAFT_TRANSLATIONS_PROJECT_CONFIG_MAX_DEPTH",
    ):
        monkeypatch.delenv(name, raising=False)
