import pandas as pd
import pytest

from lead_cleaner.exceptions import ExportError
from lead_cleaner.ingestion.exporters import (
    derive_first_name,
    encode_export,
    export_rows,
    format_number_list,
    format_omnichat,
    format_zenvia,
    render_export,
    write_export,
)
from lead_cleaner.ingestion.loaders import UnsupportedFileTypeError
from lead_cleaner.models import ExportRecord, ExportSettings


def _build_records():
    return [
        ExportRecord(number="5511987654321", name="MARIA da Silva"),
        ExportRecord(number="5562982221100", name=None),
    ]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("MARIA da Silva", "Maria"),
        ("  joão   PEDRO ", "João"),
        ("ana", "Ana"),
        ("", "Futuro Aluno UniBF"),
        (None, "Futuro Aluno UniBF"),
    ],
)
def test_derive_first_name(name, expected):
    assert derive_first_name(name) == expected


def test_derive_first_name_custom_placeholder():
    assert derive_first_name("   ", placeholder="Cliente") == "Cliente"


def test_format_omnichat():
    assert format_omnichat(_build_records()) == "fullNumber\n5511987654321\n5562982221100\n"


def test_format_omnichat_with_names():
    text = format_omnichat(_build_records(), include_names=True)

    assert text.splitlines() == [
        "fullNumber,Nome",
        "5511987654321,Maria",
        "5562982221100,Futuro Aluno UniBF",
    ]


def test_format_omnichat_accepts_plain_numbers():
    assert format_omnichat(["5511987654321"]) == "fullNumber\n5511987654321\n"


def test_format_zenvia():
    text = format_zenvia(_build_records(), "Olá, temos novidades!")

    assert text.splitlines() == [
        "celular;sms",
        "5511987654321;Olá, temos novidades!",
        "5562982221100;Olá, temos novidades!",
    ]


def test_format_zenvia_with_names():
    text = format_zenvia(_build_records(), "Oi", include_names=True, placeholder="Aluno")

    assert text.splitlines() == [
        "celular;sms;Nome",
        "5511987654321;Oi;Maria",
        "5562982221100;Oi;Aluno",
    ]


@pytest.mark.parametrize("sms_text", ["", "   ", "x" * 161])
def test_format_zenvia_rejects_bad_sms_text(sms_text):
    with pytest.raises(ExportError):
        format_zenvia(_build_records(), sms_text)


def test_format_zenvia_accepts_160_characters():
    text = format_zenvia(["5511987654321"], "y" * 160)

    assert text.splitlines()[1] == "5511987654321;" + "y" * 160


def test_format_number_list():
    assert format_number_list(_build_records()) == "5511987654321\n5562982221100\n"
    assert format_number_list([]) == ""


def test_render_export_dispatches_on_format():
    records = _build_records()

    assert render_export(records, ExportSettings()) == format_omnichat(records)
    assert render_export(records, ExportSettings(format="zenvia", sms_text="Oi")) == format_zenvia(records, "Oi")
    assert render_export(records, ExportSettings(format="txt")) == format_number_list(records)
    with pytest.raises(ExportError):
        render_export(records, ExportSettings(format="rows"))


def test_encode_export_encodings():
    assert encode_export("Olá", "cp1252") == b"Ol\xe1"
    assert encode_export("Olá", "utf-8") == "Olá".encode("utf-8")
    assert encode_export("x", "utf-8-sig").startswith(b"\xef\xbb\xbf")
    assert encode_export("5 €", "latin-1") == b"5 ?"
    with pytest.raises(ExportError):
        encode_export("x", "no-such-codec")


def test_write_export_creates_parent_directories(tmp_path):
    destination = tmp_path / "out" / "numbers.csv"

    write_export(destination, format_zenvia(_build_records(), "Promoção"), encoding="cp1252")

    assert destination.read_bytes().decode("cp1252").splitlines()[1] == "5511987654321;Promoção"


def test_export_rows_to_csv_and_excel(tmp_path):
    rows = [
        {"Nome": "Maria", "Celular": "5511987654321", "Extra": "x"},
        {"Celular": "5562982221100", "Nome": "João"},
    ]
    headers = ["Nome", "Celular"]

    csv_path = export_rows(rows, tmp_path / "leads.csv", headers=headers)
    excel_path = export_rows(rows, tmp_path / "leads.xlsx", headers=headers)

    csv_frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    excel_frame = pd.read_excel(excel_path, dtype=str, keep_default_na=False)

    assert list(csv_frame.columns) == ["Nome", "Celular", "Extra"]
    assert csv_frame.loc[1, "Nome"] == "João"
    assert csv_frame.loc[1, "Extra"] == ""
    assert excel_frame.loc[0, "Celular"] == "5511987654321"


def test_export_rows_rejects_unknown_extension(tmp_path):
    with pytest.raises(UnsupportedFileTypeError):
        export_rows([{"Celular": "1"}], tmp_path / "leads.json")
