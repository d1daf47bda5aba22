"""
================================================================================
MODELS.PY - Modelos de Datos Pydantic
================================================================================

Este módulo define los esquemas del inventario de medicamentos tal y como se
persisten en el documento JSON.

Pydantic se encarga de:
- Validar que los datos importados tienen la forma correcta
- Traducir entre los nombres del JSON (camelCase) y los atributos Python
- Conservar campos desconocidos para no perder información al reescribir

MODELOS:
- DocumentoAsociado: Referencia a un fichero adjunto (foto, prospecto...)
- Medicamento: Un registro del inventario
- AppData: El documento completo ({"medications": [...]})
- Notificacion: Recordatorio local planificado (toma, stock o caducidad)
================================================================================
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union

Numero = Union[int, float]


class DocumentoAsociado(BaseModel):
    """
    Documento o foto asociada a un medicamento.

    El uri apunta a un fichero externo: el registro no lo copia ni lo borra.

    Ejemplo:
        >>> doc = DocumentoAsociado(name="prospecto.pdf",
        ...                         uri="file:///data/documents/prospecto.pdf",
        ...                         mimeType="application/pdf")
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    uri: str
    mime_type: str = Field(..., alias="mimeType")


class Medicamento(BaseModel):
    """
    Representa un medicamento del inventario.

    Atributos:
        id: Identificador único, asignado al crear y nunca modificado
        name: Nombre a mostrar (ej: "Ibuprofeno 600")
        expiry_date: Fecha de caducidad en ISO 8601 (ej: "2025-06-30")
        total_quantity: Unidades en stock
        interval_hours: Horas entre tomas (ej: 8)
        start_time: Hora de la primera toma (ej: "10:00")
        dose_per_intake: Unidades por toma
        notes: Notas libres
        documents: Adjuntos asociados
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    expiry_date: str = Field(..., alias="expiryDate")
    total_quantity: Numero = Field(..., alias="totalQuantity")
    # Pauta de toma (opcional, sin validar)
    interval_hours: Optional[Numero] = Field(None, alias="intervalHours")
    start_time: Optional[str] = Field(None, alias="startTime")
    dose_per_intake: Optional[Numero] = Field(None, alias="dosePerIntake")
    notes: Optional[str] = None
    documents: Optional[List[DocumentoAsociado]] = None

    @field_validator("total_quantity")
    @classmethod
    def _cantidad_no_negativa(cls, v):
        if v < 0:
            raise ValueError("totalQuantity no puede ser negativo")
        return v

    def a_dict(self) -> dict:
        """Forma JSON del registro (claves camelCase, sin campos opcionales vacíos)."""
        datos = self.model_dump(by_alias=True)
        # Solo se omiten los campos declarados; las claves extra se conservan aunque sean null
        for nombre, campo in type(self).model_fields.items():
            clave = campo.alias or nombre
            if clave in datos and datos[clave] is None:
                del datos[clave]
        return datos


class AppData(BaseModel):
    """Documento persistido completo. El orden de la lista es el de inserción."""
    medications: List[Medicamento]

    def a_dict(self) -> dict:
        return {"medications": [med.a_dict() for med in self.medications]}


class DisparadorNotificacion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repeats: bool
    fire_at: Optional[str] = Field(None, alias="fireAt")
    interval_hours: Optional[Numero] = Field(None, alias="intervalHours")


class DatosNotificacion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    medication_id: str = Field(..., alias="medicationId")
    # Distingue recordatorios de toma de los avisos de stock/caducidad
    is_take_notification: bool = Field(..., alias="isTakeNotification")


class Notificacion(BaseModel):
    """Recordatorio local planificado para un medicamento."""
    id: str
    title: str
    body: str
    trigger: DisparadorNotificacion
    data: DatosNotificacion
