from __future__ import annotations

import json
from pathlib import Path
from textwrap import dedent

import pytest

from orsf.adapters import (
    AdapterRegistry,
    JsonDocumentAdapter,
    MappedAdapter,
    MappingDeclarationError,
    build_transform,
    load_adapter,
    load_mapping_directory,
    load_mapping_file,
)
from tests.helpers import build_full_document, write_mapping_file


def test_load_mapping_file_reads_adapter_and_fields(tmp_path: Path) -> None:
    declaration = load_mapping_file(write_mapping_file(tmp_path))
    assert declaration.metadata.key == ("customgame", "1.0", "gt3")
    assert declaration.metadata.file_extension == "ini"
    assert declaration.format == "ini"
    assert [mapping.native_key for mapping in declaration.mappings] == [
        "tyre_fl",
        "brake_balance",
        "wing_rear",
        "gear_1",
        "gear_2",
    ]
    assert declaration.mappings[1].required
    assert declaration.source == tmp_path / "customgame.toml"


def test_declared_transforms_and_codomain(tmp_path: Path) -> None:
    declaration = load_mapping_file(write_mapping_file(tmp_path))
    tyre, balance, wing, gear, _ = declaration.mappings
    assert tyre.to_native(200.0) == pytest.approx(29.0076, abs=1e-3)
    assert tyre.to_orsf(30.0) == pytest.approx(206.843, abs=1e-3)
    assert balance.to_native(56.5) == pytest.approx(0.565)
    assert wing.to_native(12.4) == 10.0
    assert wing.to_native(6.6) == 7.0
    assert wing.to_orsf(6.0) == 6.0
    assert gear.to_native is None and gear.to_orsf is None


def test_loaded_adapter_round_trips_a_document(tmp_path: Path) -> None:
    adapter = load_adapter(write_mapping_file(tmp_path))
    assert isinstance(adapter, MappedAdapter)
    doc = build_full_document()
    restored = adapter.from_native(adapter.to_native(doc), doc)
    assert restored.setup.tires.pressure_fl_kpa == pytest.approx(172.0)
    assert restored.setup.gearing.gear_ratios == [3.5, 2.8, 2.3, 1.9, 1.6]
    assert restored.setup.aero.rear_wing == 8.0
    assert adapter.suggested_filename(doc) == "gt3_Spa-Francorchamps_Baseline.ini"


def test_json_mapping_file_with_flat_adapter_identity(tmp_path: Path) -> None:
    payload = {
        "adapter": "customgame",
        "version": "2.0",
        "carKey": "lmp2",
        "filenameTemplates": {"export": "{make}_{model}.{ext}", "import_glob": "{car}_*.{ext}"},
        "installPaths": {"linux": "/srv/lmp2", "windows": "C:/lmp2"},
        "capabilities": {"import": False},
        "fields": [
            {
                "orsf": "setup.brakes.brake_bias_pct",
                "nativeKey": "bias",
                "transform": "lut",
                "lut": [{"x": 40, "y": 0}, {"x": 70, "y": 30}],
            },
            {
                "orsf": "setup.drivetrain.final_drive_ratio",
                "native": "fdr",
                "steps": [{"transform": "scale", "factor": 10}, {"transform": "offset", "amount": 1}],
            },
        ],
    }
    source = tmp_path / "lmp2.json"
    source.write_text(json.dumps(payload), encoding="utf8")
    declaration = load_mapping_file(source)
    assert declaration.metadata.key == ("customgame", "2.0", "lmp2")
    assert declaration.metadata.filename_template == "{make}_{model}.{ext}"
    assert declaration.metadata.import_pattern() == "lmp2_*.ini"
    assert declaration.metadata.install_path("linux") == Path("/srv/lmp2")
    assert declaration.metadata.install_path("macos") is None
    assert not declaration.metadata.supports("import")
    assert declaration.metadata.supports("export")
    bias, fdr = declaration.mappings
    assert bias.native_key == "bias"
    assert bias.to_native(55.0) == pytest.approx(15.0)
    assert bias.to_orsf(15.0) == pytest.approx(55.0)
    assert fdr.to_native(3.9) == pytest.approx(40.0)
    assert fdr.to_orsf(40.0) == pytest.approx(3.9)


def test_json_format_builds_document_adapter(tmp_path: Path) -> None:
    source = write_mapping_file(
        tmp_path,
        dedent(
            """\
            fields = []

            [adapter]
            id = "canonical"
            format = "json"
            """
        ),
        name="canonical.toml",
    )
    adapter = load_adapter(source)
    assert isinstance(adapter, JsonDocumentAdapter)
    assert adapter.metadata.id == "canonical"


def test_build_transform_from_descriptor() -> None:
    assert build_transform({"transform": "invert"})(4.0) == 0.25
    assert build_transform({"transform": "linear", "scale": 2})(3.0) == 6.0
    clamp = build_transform({"transform": "clamp", "max": 5.0})
    assert clamp(-100.0) == -100.0
    assert clamp(9.0) == 5.0
    with pytest.raises(MappingDeclarationError):
        build_transform({"transform": "scale"})
    with pytest.raises(MappingDeclarationError):
        build_transform({"transform": "lut", "lut": []})


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ("[[fields]]\norsf = 'setup.aero.front_wing'\nnative = 'w'\n", "needs an [adapter] table"),
        ("[adapter]\nid = 'g'\n", "list of [[fields]]"),
        ("[adapter]\nid = 'g'\nformat = 'xml'\nfields = []\n", "unknown adapter format"),
        (
            "[adapter]\nid = 'g'\n[[fields]]\norsf = 'setup.aero.sidepod'\nnative = 'w'\n",
            "unknown field",
        ),
        (
            "[adapter]\nid = 'g'\n[[fields]]\norsf = 'setup.aero.front_wing'\nnative = 'w'\ntransform = 'warp'\n",
            "unknown transform",
        ),
        (
            "[adapter]\nid = 'g'\n[[fields]]\norsf = 'setup.aero.front_wing'\nnative = 'w'\n"
            "transform = 'unit'\nfrom = 'kpa'\nto = 'mm'\n",
            "invalid 'unit' transform",
        ),
        (
            "[adapter]\nid = 'g'\n[[fields]]\norsf = 'setup.aero.front_wing'\nnative = 'w'\n"
            "transform = 'scale'\nfactor = 0.0\n",
            "declare a 'reverse' transform",
        ),
        ("[adapter\n", "customgame.toml"),
        ("fields = []\n[adapter]\nid = 'g'\n[install_paths]\nbeos = '/boot'\n", "unknown install platform"),
        ("fields = []\ncapabilities = 'all'\n[adapter]\nid = 'g'\n", "'capabilities' must be a table"),
        ("fields = []\n[adapter]\nid = 'g'\nimport_glob = '{track}.set'\n", "Unknown token in import glob"),
    ],
)
def test_malformed_declarations(tmp_path: Path, contents: str, message: str) -> None:
    source = write_mapping_file(tmp_path, contents)
    with pytest.raises(MappingDeclarationError, match=message.replace("[", r"\[")):
        load_mapping_file(source)


def test_scale_by_zero_with_reverse_descriptor_loads(tmp_path: Path) -> None:
    contents = dedent(
        """\
        [adapter]
        id = "g"

        [[fields]]
        orsf = "setup.aero.front_wing"
        native = "w"
        transform = "scale"
        factor = 0.0
        reverse = { transform = "identity" }
        """
    )
    declaration = load_mapping_file(write_mapping_file(tmp_path, contents))
    assert declaration.mappings[0].to_orsf(3.0) == 3.0


def test_load_mapping_directory_registers_every_file(tmp_path: Path) -> None:
    write_mapping_file(tmp_path)
    write_mapping_file(
        tmp_path,
        "fields = []\n[adapter]\nid = 'other'\nformat = 'json'\n",
        name="other.toml",
    )
    (tmp_path / "README.txt").write_text("ignored", encoding="utf8")
    registry = AdapterRegistry()
    loaded = load_mapping_directory(tmp_path, registry)
    assert [adapter.metadata.id for adapter in loaded] == ["customgame", "other"]
    assert registry.resolve("customgame", "1.0", "gt3") is loaded[0]


def test_missing_mapping_directory_is_empty(tmp_path: Path) -> None:
    assert load_mapping_directory(tmp_path / "absent", AdapterRegistry()) == []
