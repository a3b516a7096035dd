from pathlib import Path

import pytest

from onedoc import config as config_module
from onedoc.config import Config, Doc, loads
from onedoc.errors import ConfigError


def test_single_input_string():
    config = loads(
        """
[[ doc ]]
input = "src/lib.rs"
output = "README.md"
template = "docs/README_TEMPLATE.md"
"""
    )
    assert config == Config(
        docs=[Doc(inputs=[Path("src/lib.rs")], output=Path("README.md"), template=Path("docs/README_TEMPLATE.md"))],
        links={},
    )


def test_multiple_input_strings():
    config = loads(
        """
[[ doc ]]
input = ["src/lib.rs", "src/other.rs"]
output = "README.md"
template = "docs/README_TEMPLATE.md"
"""
    )
    assert config.docs == [
        Doc(
            inputs=[Path("src/lib.rs"), Path("src/other.rs")],
            output=Path("README.md"),
            template=Path("docs/README_TEMPLATE.md"),
        )
    ]


def test_links_table():
    config = loads('[links]\nVec = "https://doc.rust-lang.org/std/vec/struct.Vec.html"\n')
    assert config.docs == []
    assert config.links == {"Vec": "https://doc.rust-lang.org/std/vec/struct.Vec.html"}


@pytest.mark.parametrize(
    "text, message",
    [
        ("[[doc]]\ninput = 'a.rs'\n", "missing `doc.output`"),
        ("[[doc]]\noutput = 'README.md'\n", "missing `doc.input`"),
        ("[[doc]]\ninput = []\noutput = 'README.md'\n", "doc.input"),
        ("[[doc]]\ninput = 'a.rs'\noutput = 'README.md'\nextra = 1\n", "unknown keys in `doc`: extra"),
        ("[links]\nVec = 3\n", "link `Vec` must map to a string"),
        ("doc = 'nope'\n", "array of tables"),
        ("[[doc]\n", "failed to deserialize config"),
    ],
)
def test_invalid_config(text, message):
    with pytest.raises(ConfigError, match=message):
        loads(text)


def test_missing_file_uses_package_defaults(crate, crate_metadata):
    package = crate_metadata.select_package()
    config = config_module.load(crate, package)
    assert config.docs == [Doc(inputs=[crate / "src" / "lib.rs"], output=crate / "README.md")]
    assert config.links == {}


def test_paths_are_relative_to_workspace_root(crate, crate_metadata):
    (crate / "onedoc.toml").write_text(
        '[[doc]]\ninput = ["src/lib.rs", "docs/USAGE.md"]\noutput = "docs/OUT.md"\ntemplate = "docs/tpl.md"\n',
        encoding="utf-8",
    )
    config = config_module.load(crate, crate_metadata.select_package())
    doc = config.docs[0]
    assert doc.inputs == [crate / "src" / "lib.rs", crate / "docs" / "USAGE.md"]
    assert doc.output == crate / "docs" / "OUT.md"
    assert doc.template == crate / "docs" / "tpl.md"


def test_load_errors_name_the_file(crate, crate_metadata):
    (crate / "onedoc.toml").write_text("[[doc]]\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="failed to load config from"):
        config_module.load(crate, crate_metadata.select_package())
