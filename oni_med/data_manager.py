"""
================================================================================
DATA_MANAGER.PY - Gestor de Persistencia del Inventario
================================================================================

Módulo que gestiona el almacenamiento y recuperación del inventario de
medicamentos. Todo el estado vive en UN documento JSON bajo una clave fija:

    {
        "medications": [
            {
                "id": "3f2b...",
                "name": "Ibuprofeno 600",
                "expiryDate": "2025-06-30",
                "totalQuantity": 20,
                "intervalHours": 8,
                "startTime": "08:00",
                "dosePerIntake": 1,
                "notes": "Tomar con comida",
                "documents": [{"name": "...", "uri": "...", "mimeType": "..."}]
            },
            ...
        ]
    }

Cada mutación lee el documento entero, lo modifica en memoria y lo reescribe.
Las mutaciones se serializan con un cerrojo del propio store (Streamlit ejecuta
cada sesión en su hilo) para que dos escrituras no se pisen.

FUNCIONES PRINCIPALES:
- cargar_datos(): Documento completo (vacío si no hay datos)
- guardar_datos(): Reescribe el documento completo
- agregar_medicamento(): Alta con ID nuevo
- actualizar_medicamento(): Reemplaza por ID (no-op si no existe)
- eliminar_medicamento(): Baja por ID (no-op si no existe)
- exportar_datos(): Copia JSON con marca de tiempo
- importar_datos(): Fusiona o sobrescribe desde un fichero JSON

ERRORES:
- DatosCorruptosError: El documento existe pero no es válido
- ArchivoImportacionInvalido: El fichero a importar no es JSON válido
  o no tiene la forma {"medications": [...]}
- OSError: Fallos de lectura/escritura, se propagan tal cual
================================================================================
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NamedTuple, Optional, Set

from pydantic import ValidationError

from oni_med import config
from oni_med.models import AppData, Medicamento
from oni_med.storage import AlmacenJSON

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORES
# =============================================================================

class ErrorDatos(Exception):
    """Error base de la capa de datos."""


class DatosCorruptosError(ErrorDatos):
    """El documento persistido existe pero no se puede interpretar."""


class ArchivoImportacionInvalido(ErrorDatos):
    """El fichero a importar no es JSON válido o no tiene la forma esperada."""


class ResultadoMutacion(NamedTuple):
    """
    Resultado de actualizar/eliminar.

    Atributos:
        medications: Lista completa tras la operación
        encontrado: False si el ID no existía (la operación no hizo nada)
    """
    medications: List[Medicamento]
    encontrado: bool


# =============================================================================
# UTILIDADES
# =============================================================================

def serializar(datos: AppData, indent: Optional[int] = None) -> str:
    return json.dumps(datos.a_dict(), indent=indent, ensure_ascii=False)


def generar_id(existentes: Set[str]) -> str:
    """
    Genera un ID que no colisiona con ninguno de los existentes.

    Args:
        existentes: IDs ya presentes en el inventario

    Returns:
        str: UUID4 en hexadecimal (ej: "9b1d...")
    """
    nuevo = uuid.uuid4().hex
    while nuevo in existentes:
        nuevo = uuid.uuid4().hex
    return nuevo


def _sin_duplicados(medicamentos: List[Medicamento]) -> List[Medicamento]:
    """Conserva la primera aparición de cada ID."""
    vistos = set()
    resultado = []
    for med in medicamentos:
        if med.id in vistos:
            logger.warning("⚠️ ID duplicado en el fichero importado, se descarta: %s", med.id)
            continue
        vistos.add(med.id)
        resultado.append(med)
    return resultado


def leer_archivo_importacion(ruta) -> AppData:
    """
    Lee y valida un fichero de importación.

    Args:
        ruta: Ruta al fichero JSON

    Returns:
        AppData: Datos candidatos a importar

    Raises:
        OSError: Si el fichero no se puede leer
        ArchivoImportacionInvalido: Si no es JSON válido o le faltan campos
    """
    contenido = Path(ruta).read_bytes()
    try:
        texto = contenido.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ArchivoImportacionInvalido(f"El fichero {ruta} no está codificado en UTF-8") from e
    try:
        return AppData.model_validate_json(texto)
    except ValidationError as e:
        raise ArchivoImportacionInvalido(
            f"El fichero {ruta} no es un inventario válido ({e.error_count()} errores)"
        ) from e


# =============================================================================
# STORE
# =============================================================================

class InventarioStore:
    """
    Inventario persistido como un único documento JSON.

    Atributos:
        almacen: Almacén clave-valor donde vive el documento
        directorio_exportacion: Carpeta de las exportaciones
        clave: Clave fija del documento
    """

    def __init__(self, almacen: AlmacenJSON, directorio_exportacion, clave: str = config.STORAGE_KEY):
        self.almacen = almacen
        self.directorio_exportacion = Path(directorio_exportacion)
        self.clave = clave
        # Re-entrante: las mutaciones llaman a cargar/guardar dentro del cerrojo
        self._lock = threading.RLock()
        self._ultimo_respaldo = None

    # -------------------------------------------------------------------------
    # LECTURA / ESCRITURA
    # -------------------------------------------------------------------------

    def cargar_datos(self, estricto: bool = False) -> AppData:
        """
        Carga el inventario completo.

        Si no hay documento (primer arranque) devuelve un inventario vacío.
        Si el documento está corrupto se registra el error, se guarda una
        copia del fichero y se devuelve un inventario vacío; con estricto=True
        se lanza DatosCorruptosError en su lugar.

        Args:
            estricto: Lanzar en vez de recuperar cuando los datos están corruptos

        Returns:
            AppData: El inventario
        """
        try:
            texto = self.almacen.get_item(self.clave)
        except UnicodeDecodeError as e:
            return self._recuperar_corrupto(
                DatosCorruptosError(f"El documento {self.clave} no está codificado en UTF-8"), e, estricto
            )
        if texto is None:
            logger.debug("No hay datos guardados bajo %s, inventario vacío", self.clave)
            return AppData(medications=[])

        try:
            return AppData.model_validate_json(texto)
        except ValidationError as e:
            return self._recuperar_corrupto(
                DatosCorruptosError(f"El documento {self.clave} no es válido ({e.error_count()} errores)"), e, estricto
            )

    def _recuperar_corrupto(self, error: DatosCorruptosError, causa: Exception, estricto: bool) -> AppData:
        if estricto:
            raise error from causa
        logger.error("⚠️ Error al cargar los datos: %s", error)
        self._respaldar_corrupto()
        return AppData(medications=[])

    def _respaldar_corrupto(self):
        # Una sola copia por versión del fichero, aunque se cargue muchas veces
        ruta = self.almacen.ruta(self.clave)
        try:
            estado = ruta.stat()
        except FileNotFoundError:
            return
        firma = (estado.st_mtime_ns, estado.st_size)
        if firma != self._ultimo_respaldo:
            self.almacen.respaldar(self.clave)
            self._ultimo_respaldo = firma

    def guardar_datos(self, datos) -> None:
        """
        Reescribe el documento completo.

        Args:
            datos: AppData (o diccionario con su forma)
        """
        if not isinstance(datos, AppData):
            datos = AppData.model_validate(datos)
        with self._lock:
            self.almacen.set_item(self.clave, serializar(datos))

    def obtener_medicamento(self, id_medicamento: str) -> Optional[Medicamento]:
        for med in self.cargar_datos().medications:
            if med.id == id_medicamento:
                return med
        return None

    # -------------------------------------------------------------------------
    # MUTACIONES
    # -------------------------------------------------------------------------

    def agregar_medicamento(self, nuevo) -> List[Medicamento]:
        """
        Añade un medicamento al final del inventario con un ID nuevo.

        Args:
            nuevo: Diccionario o Medicamento; si trae "id" se ignora

        Returns:
            list: La lista de medicamentos actualizada
        """
        if isinstance(nuevo, Medicamento):
            campos = nuevo.a_dict()
        else:
            campos = dict(nuevo)
        campos.pop("id", None)

        with self._lock:
            datos = self.cargar_datos()
            nuevo_id = generar_id({m.id for m in datos.medications})
            med = Medicamento.model_validate({**campos, "id": nuevo_id})
            datos.medications.append(med)
            self.guardar_datos(datos)

        logger.info("➕ Medicamento añadido: %s (%s)", med.name, med.id)
        return datos.medications

    def actualizar_medicamento(self, actualizado) -> ResultadoMutacion:
        """
        Reemplaza el medicamento con el mismo ID, manteniendo su posición.

        Si el ID no existe no se toca nada y se devuelve encontrado=False.

        Args:
            actualizado: Medicamento (o diccionario) con la información nueva

        Returns:
            ResultadoMutacion: Lista actualizada y si hubo coincidencia
        """
        if not isinstance(actualizado, Medicamento):
            actualizado = Medicamento.model_validate(actualizado)

        with self._lock:
            datos = self.cargar_datos()
            for i, med in enumerate(datos.medications):
                if med.id == actualizado.id:
                    datos.medications[i] = actualizado
                    self.guardar_datos(datos)
                    logger.info("✏️ Medicamento actualizado: %s", actualizado.id)
                    return ResultadoMutacion(datos.medications, True)

        logger.info("🔍 No existe el medicamento %s, nada que actualizar", actualizado.id)
        return ResultadoMutacion(datos.medications, False)

    def eliminar_medicamento(self, id_medicamento: str) -> ResultadoMutacion:
        """
        Elimina todos los registros con ese ID.

        Llamarlo dos veces con el mismo ID es inofensivo: la segunda vez
        devuelve encontrado=False y no reescribe nada.

        Args:
            id_medicamento: ID del medicamento a eliminar

        Returns:
            ResultadoMutacion: Lista actualizada y si hubo coincidencia
        """
        with self._lock:
            datos = self.cargar_datos()
            restantes = [m for m in datos.medications if m.id != id_medicamento]
            encontrado = len(restantes) != len(datos.medications)
            if encontrado:
                datos.medications = restantes
                self.guardar_datos(datos)
                logger.info("🗑️ Medicamento eliminado: %s", id_medicamento)

        return ResultadoMutacion(datos.medications, encontrado)

    # -------------------------------------------------------------------------
    # EXPORTAR / IMPORTAR
    # -------------------------------------------------------------------------

    def exportar_datos(self) -> Path:
        """
        Exporta el inventario a un fichero JSON nuevo.

        El nombre lleva la hora de generación (ISO 8601, UTC), así que cada
        llamada crea un fichero distinto; nunca se sobrescribe una exportación
        anterior.

        Returns:
            Path: Ruta del fichero escrito

        Raises:
            DatosCorruptosError: Si el documento actual no es válido
            OSError: Si no se puede escribir el fichero
        """
        datos = self.cargar_datos(estricto=True)
        texto = serializar(datos, indent=2)

        self.directorio_exportacion.mkdir(parents=True, exist_ok=True)
        sello = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S.%fZ")
        base = f"{config.EXPORT_PREFIX}{sello}"
        ruta = self.directorio_exportacion / f"{base}.json"
        n = 1
        while True:
            try:
                with open(ruta, "x", encoding="utf-8") as f:
                    f.write(texto)
                break
            except FileExistsError:
                ruta = self.directorio_exportacion / f"{base}-{n}.json"
                n += 1

        logger.info("📤 Exportados %d medicamentos a %s", len(datos.medications), ruta)
        return ruta

    def importar_datos(self, ruta, overwrite: bool) -> List[Medicamento]:
        """
        Importa un inventario desde un fichero JSON.

        Args:
            ruta: Fichero a importar
            overwrite: True para reemplazar todo el inventario,
                       False para fusionar (solo se añaden IDs nuevos; los que
                       ya existen se descartan sin tocar el registro guardado)

        Returns:
            list: La lista de medicamentos resultante

        Raises:
            OSError: Si el fichero no se puede leer
            ArchivoImportacionInvalido: Si el fichero no es un inventario válido
        """
        candidato = leer_archivo_importacion(ruta)

        with self._lock:
            if overwrite:
                candidato.medications = _sin_duplicados(candidato.medications)
                self.guardar_datos(candidato)
                logger.info("📥 Inventario sobrescrito con %d medicamentos desde %s",
                            len(candidato.medications), ruta)
                return candidato.medications

            existentes = self.cargar_datos()
            ids = {m.id for m in existentes.medications}
            nuevos = 0
            for med in candidato.medications:
                if med.id not in ids:
                    existentes.medications.append(med)
                    ids.add(med.id)
                    nuevos += 1
            self.guardar_datos(existentes)

        logger.info("📥 Fusión desde %s: %d nuevos, %d descartados",
                    ruta, nuevos, len(candidato.medications) - nuevos)
        return existentes.medications


# =============================================================================
# STORE POR DEFECTO (según configuración)
# =============================================================================

_store = None
_store_lock = threading.Lock()


def obtener_store() -> InventarioStore:
    """Store compartido de la aplicación, creado a partir de config."""
    global _store
    with _store_lock:
        if _store is None:
            _store = InventarioStore(
                AlmacenJSON(config.directorio_datos()),
                config.directorio_exportacion(),
            )
        return _store


def restablecer_store() -> None:
    """Olvida el store compartido (se recrea con la configuración actual)."""
    global _store
    with _store_lock:
        _store = None


def cargar_datos(estricto: bool = False) -> AppData:
    return obtener_store().cargar_datos(estricto=estricto)


def guardar_datos(datos) -> None:
    obtener_store().guardar_datos(datos)


def obtener_medicamento(id_medicamento: str) -> Optional[Medicamento]:
    return obtener_store().obtener_medicamento(id_medicamento)


def agregar_medicamento(nuevo) -> List[Medicamento]:
    return obtener_store().agregar_medicamento(nuevo)


def actualizar_medicamento(actualizado) -> ResultadoMutacion:
    return obtener_store().actualizar_medicamento(actualizado)


def eliminar_medicamento(id_medicamento: str) -> ResultadoMutacion:
    return obtener_store().eliminar_medicamento(id_medicamento)


def exportar_datos() -> Path:
    return obtener_store().exportar_datos()


def importar_datos(ruta, overwrite: bool) -> List[Medicamento]:
    return obtener_store().importar_datos(ruta, overwrite)
