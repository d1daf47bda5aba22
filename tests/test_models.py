import pytest
from pydantic import ValidationError

from oni_med.models import AppData, Medicamento


def test_record_reads_camel_case_and_dumps_without_empty_fields():
    med = Medicamento.model_validate({
        "id": "x",
        "name": "Ibuprofen",
        "expiryDate": "2024-01-01",
        "totalQuantity": 10,
        "documents": [{"name": "leaflet.pdf", "uri": "file:///tmp/leaflet.pdf", "mimeType": "application/pdf"}],
    })

    assert med.expiry_date == "2024-01-01"
    assert med.documents[0].mime_type == "application/pdf"
    assert med.a_dict() == {
        "id": "x",
        "name": "Ibuprofen",
        "expiryDate": "2024-01-01",
        "totalQuantity": 10,
        "documents": [{"name": "leaflet.pdf", "uri": "file:///tmp/leaflet.pdf", "mimeType": "application/pdf"}],
    }


def test_unknown_keys_survive_round_trip():
    datos = {"id": "x", "name": "A", "expiryDate": "2030-01-01", "totalQuantity": 1, "barcode": "123"}

    assert Medicamento.model_validate(datos).a_dict() == datos


def test_empty_name_is_accepted():
    assert Medicamento(id="x", name="", expiry_date="2030-01-01", total_quantity=0).name == ""


def test_negative_quantity_is_rejected():
    with pytest.raises(ValidationError):
        Medicamento(id="x", name="A", expiry_date="2030-01-01", total_quantity=-2)


def test_app_data_requires_medications_list():
    with pytest.raises(ValidationError):
        AppData.model_validate({"meds": []})

    assert AppData.model_validate_json('{"medications": []}').medications == []


def test_unknown_null_keys_survive_round_trip():
    datos = {"id": "x", "name": "A", "expiryDate": "2030-01-01", "totalQuantity": 1, "lot": None}

    assert Medicamento.model_validate(datos).a_dict() == datos
