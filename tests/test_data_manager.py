import json
import threading
import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from oni_med import data_manager
from oni_med.data_manager import (
    ArchivoImportacionInvalido,
    DatosCorruptosError,
    generar_id,
)
from oni_med.models import Medicamento


def _ibuprofeno(**extra):
    datos = {"name": "Ibuprofen", "totalQuantity": 10, "expiryDate": "2024-01-01"}
    datos.update(extra)
    return datos


def _escribir_importacion(ruta, medicamentos):
    ruta.write_text(json.dumps({"medications": medicamentos}), encoding="utf-8")
    return ruta


def _registro(id_, name="Med", **extra):
    datos = {"id": id_, "name": name, "expiryDate": "2030-01-01", "totalQuantity": 1}
    datos.update(extra)
    return datos


# =============================================================================
# CARGA
# =============================================================================

def test_load_without_document_returns_empty_collection(store):
    assert store.cargar_datos().medications == []


def test_load_corrupt_document_falls_back_to_empty_and_keeps_a_copy(store):
    ruta = store.almacen.ruta(store.clave)
    ruta.parent.mkdir(parents=True)
    ruta.write_text("{not json", encoding="utf-8")

    assert store.cargar_datos().medications == []
    assert store.cargar_datos().medications == []

    copias = list(ruta.parent.glob(f"{store.clave}.corrupt-*.json"))
    assert len(copias) == 1
    assert copias[0].read_text(encoding="utf-8") == "{not json"


def test_load_non_utf8_document_is_treated_as_corrupt(store):
    ruta = store.almacen.ruta(store.clave)
    ruta.parent.mkdir(parents=True)
    ruta.write_bytes(b'{"medications": [{"name": "\xff\xfe"}]}')

    assert store.cargar_datos().medications == []
    assert len(list(ruta.parent.glob(f"{store.clave}.corrupt-*.json"))) == 1

    with pytest.raises(DatosCorruptosError):
        store.cargar_datos(estricto=True)


def test_strict_load_raises_on_wrong_shape(store):
    store.almacen.set_item(store.clave, json.dumps({"medications": [{"name": "no id"}]}))

    with pytest.raises(DatosCorruptosError):
        store.cargar_datos(estricto=True)


# =============================================================================
# ALTA
# =============================================================================

def test_add_to_empty_store_persists_one_record_with_generated_id(store):
    store.agregar_medicamento(_ibuprofeno())

    medicamentos = store.cargar_datos().medications
    assert len(medicamentos) == 1
    med = medicamentos[0]
    assert med.id
    assert med.name == "Ibuprofen"
    assert med.total_quantity == 10
    assert med.expiry_date == "2024-01-01"


def test_add_ignores_incoming_id_and_appends_in_order(store):
    store.agregar_medicamento(_ibuprofeno(id="fixed"))
    lista = store.agregar_medicamento(_ibuprofeno(name="Paracetamol", id="fixed"))

    assert [m.name for m in lista] == ["Ibuprofen", "Paracetamol"]
    assert "fixed" not in {m.id for m in lista}


def test_add_generates_pairwise_distinct_ids(store):
    for i in range(25):
        store.agregar_medicamento(_ibuprofeno(name=f"Med {i}"))

    ids = [m.id for m in store.cargar_datos().medications]
    assert len(ids) == 25
    assert len(set(ids)) == 25


def test_generar_id_skips_ids_already_in_use(monkeypatch):
    secuencia = iter([uuid.UUID(int=1), uuid.UUID(int=1), uuid.UUID(int=2)])
    monkeypatch.setattr(data_manager.uuid, "uuid4", lambda: next(secuencia))

    assert generar_id({uuid.UUID(int=1).hex}) == uuid.UUID(int=2).hex


def test_add_accepts_a_model_instance(store):
    med = Medicamento(id="ignored", name="Amoxicillin", expiry_date="2030-05-01", total_quantity=12)

    lista = store.agregar_medicamento(med)

    assert lista[0].name == "Amoxicillin"
    assert lista[0].id != "ignored"


def test_add_rejects_negative_quantity(store):
    with pytest.raises(ValidationError):
        store.agregar_medicamento(_ibuprofeno(totalQuantity=-1))

    assert store.cargar_datos().medications == []


def test_concurrent_adds_do_not_lose_updates(store):
    def agregar_varios(n):
        for i in range(5):
            store.agregar_medicamento(_ibuprofeno(name=f"hilo {n}-{i}"))

    hilos = [threading.Thread(target=agregar_varios, args=(n,)) for n in range(8)]
    for h in hilos:
        h.start()
    for h in hilos:
        h.join()

    assert len(store.cargar_datos().medications) == 40


# =============================================================================
# EDICIÓN Y BAJA
# =============================================================================

def test_update_replaces_record_in_place(store):
    store.guardar_datos({"medications": [_registro("a"), _registro("x", "Old"), _registro("b")]})

    resultado = store.actualizar_medicamento(_registro("x", "Renamed", totalQuantity=3))

    assert resultado.encontrado is True
    medicamentos = store.cargar_datos().medications
    assert [m.id for m in medicamentos] == ["a", "x", "b"]
    assert medicamentos[1].name == "Renamed"
    assert medicamentos[1].total_quantity == 3


def test_update_unknown_id_leaves_collection_unchanged(store):
    store.guardar_datos({"medications": [_registro("a")]})
    antes = store.almacen.get_item(store.clave)

    resultado = store.actualizar_medicamento(_registro("missing", "Ghost"))

    assert resultado.encontrado is False
    assert [m.id for m in resultado.medications] == ["a"]
    assert store.almacen.get_item(store.clave) == antes


def test_update_keeps_unknown_fields(store):
    store.guardar_datos({"medications": [_registro("x", barcode="8470001", lot=None)]})

    med = store.obtener_medicamento("x")
    store.actualizar_medicamento(med.model_copy(update={"name": "Renamed"}))

    guardado = json.loads(store.almacen.get_item(store.clave))
    assert guardado["medications"][0]["barcode"] == "8470001"
    assert "lot" in guardado["medications"][0]
    assert guardado["medications"][0]["lot"] is None
    assert guardado["medications"][0]["name"] == "Renamed"


def test_delete_is_idempotent(store):
    lista = store.agregar_medicamento(_ibuprofeno())
    id_ = lista[0].id

    primero = store.eliminar_medicamento(id_)
    segundo = store.eliminar_medicamento(id_)

    assert primero.encontrado is True
    assert segundo.encontrado is False
    assert store.cargar_datos().medications == []
    assert store.obtener_medicamento(id_) is None


# =============================================================================
# EXPORTAR / IMPORTAR
# =============================================================================

def test_export_writes_pretty_json_with_timestamped_name(store):
    store.agregar_medicamento(_ibuprofeno())

    ruta = store.exportar_datos()

    assert ruta.parent == store.directorio_exportacion
    assert ruta.name.startswith("oni-med-data-")
    texto = ruta.read_text(encoding="utf-8")
    assert '\n  "medications"' in texto
    assert json.loads(texto)["medications"][0]["name"] == "Ibuprofen"


def test_export_never_overwrites_previous_file(store, monkeypatch):
    class _RelojFijo:
        @staticmethod
        def now(tz=None):
            return datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    monkeypatch.setattr(data_manager, "datetime", _RelojFijo)

    primera = store.exportar_datos()
    segunda = store.exportar_datos()

    assert primera != segunda
    assert segunda.name.endswith("-1.json")
    assert primera.exists() and segunda.exists()


def test_export_refuses_corrupt_document(store):
    store.almacen.set_item(store.clave, "[]")

    with pytest.raises(DatosCorruptosError):
        store.exportar_datos()


def test_export_then_overwrite_import_restores_exported_records(store):
    store.agregar_medicamento(_ibuprofeno())
    store.agregar_medicamento(_ibuprofeno(name="Paracetamol", notes="after meals"))
    exportados = store.cargar_datos().medications
    ruta = store.exportar_datos()

    store.eliminar_medicamento(exportados[0].id)
    store.agregar_medicamento(_ibuprofeno(name="Other"))
    lista = store.importar_datos(ruta, overwrite=True)

    assert lista == exportados
    assert store.cargar_datos().medications == exportados


def test_merge_import_appends_only_new_ids(store, tmp_path):
    store.guardar_datos({"medications": [_registro("A", "Alpha"), _registro("B", "Beta")]})
    ruta = _escribir_importacion(tmp_path / "import.json", [
        _registro("B", "Beta imported", totalQuantity=99),
        _registro("C", "Gamma"),
    ])

    lista = store.importar_datos(ruta, overwrite=False)

    assert [m.id for m in lista] == ["A", "B", "C"]
    beta = store.obtener_medicamento("B")
    assert beta.name == "Beta"
    assert beta.total_quantity == 1


def test_merge_import_keeps_first_of_duplicated_ids_in_file(store, tmp_path):
    ruta = _escribir_importacion(tmp_path / "import.json", [
        _registro("C", "first"),
        _registro("C", "second"),
    ])

    lista = store.importar_datos(ruta, overwrite=False)

    assert [(m.id, m.name) for m in lista] == [("C", "first")]


def test_overwrite_import_drops_duplicated_ids(store, tmp_path):
    store.guardar_datos({"medications": [_registro("A")]})
    ruta = _escribir_importacion(tmp_path / "import.json", [
        _registro("X", "first"),
        _registro("X", "second"),
        _registro("Y"),
    ])

    lista = store.importar_datos(ruta, overwrite=True)

    assert [(m.id, m.name) for m in lista] == [("X", "first"), ("Y", "Med")]


def test_import_invalid_json_raises_and_keeps_data(store, tmp_path):
    store.guardar_datos({"medications": [_registro("A")]})
    ruta = tmp_path / "broken.json"
    ruta.write_text("{oops", encoding="utf-8")

    with pytest.raises(ArchivoImportacionInvalido):
        store.importar_datos(ruta, overwrite=True)

    assert [m.id for m in store.cargar_datos().medications] == ["A"]


def test_import_latin1_file_raises_and_keeps_data(store, tmp_path):
    store.guardar_datos({"medications": [_registro("A")]})
    ruta = tmp_path / "latin1.json"
    ruta.write_bytes(json.dumps({"medications": [_registro("B", name="Ácido fólico")]},
                                ensure_ascii=False).encode("latin-1"))

    with pytest.raises(ArchivoImportacionInvalido):
        store.importar_datos(ruta, overwrite=False)

    assert [m.id for m in store.cargar_datos().medications] == ["A"]


def test_import_wrong_shape_raises(store, tmp_path):
    ruta = tmp_path / "wrong.json"
    ruta.write_text(json.dumps({"meds": []}), encoding="utf-8")

    with pytest.raises(ArchivoImportacionInvalido):
        store.importar_datos(ruta, overwrite=False)


def test_import_missing_file_propagates_io_error(store, tmp_path):
    with pytest.raises(FileNotFoundError):
        store.importar_datos(tmp_path / "nowhere.json", overwrite=False)


# =============================================================================
# STORE POR DEFECTO
# =============================================================================

def test_module_functions_use_configured_data_dir(store_por_defecto):
    data_manager.agregar_medicamento(_ibuprofeno())

    assert (store_por_defecto / "ONI_MED_STORAGE_KEY.json").exists()
    assert len(data_manager.cargar_datos().medications) == 1

    ruta = data_manager.exportar_datos()
    assert ruta.parent == store_por_defecto / "exports"
