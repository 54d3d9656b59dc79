"""
Templates padrão carregados na primeira abertura do store.

A coleção de templates só é semeada quando não existe snapshot
salvo; depois disso os templates são dados como qualquer outro.
"""

from typing import List

from .entities import FieldType, FormField, PdfTemplateEntity

SYSTEM_USER_ID = "1"


def _f(name: str, label: str, type: FieldType, required: bool = False, options=None) -> FormField:
    return FormField(
        id=name,
        name=name,
        label=label,
        type=type,
        required=required,
        options=list(options) if options else None,
    )


T, TA, NUM, DATE = FieldType.TEXT, FieldType.TEXTAREA, FieldType.NUMBER, FieldType.DATE
SEL, CHK, SIG, PHOTO = FieldType.SELECT, FieldType.CHECKBOX, FieldType.SIGNATURE, FieldType.PHOTO


def default_templates() -> List[PdfTemplateEntity]:
    """Retorna rascunhos novos dos oito templates padrão."""
    return [
        PdfTemplateEntity(
            name="Orden de Trabajo",
            description="Formato principal de orden de trabajo",
            slug="orden-trabajo",
            category="general",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("ot_number", "Número de OT", T, True),
                _f("client_name", "Nombre del Cliente", T, True),
                _f("client_contact", "Contacto", T, True),
                _f("service_date", "Fecha de Servicio", DATE, True),
                _f("service_description", "Descripción del Servicio", TA, True),
                _f("technician_signature", "Firma Técnico", SIG, True),
                _f("client_signature", "Firma Cliente", SIG, True),
            ],
        ),
        PdfTemplateEntity(
            name="Visita Técnica / Diagnóstico",
            description="Formato para diagnósticos técnicos",
            slug="visita-tecnica-diagnostico",
            category="diagnostic",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("equipment_type", "Tipo de Equipo", T, True),
                _f("equipment_brand", "Marca", T, True),
                _f("equipment_model", "Modelo", T, True),
                _f("serial_number", "Número de Serie", T, True),
                _f("problem_description", "Descripción del Problema", TA, True),
                _f("diagnostic_result", "Resultado del Diagnóstico", TA, True),
                _f("recommendations", "Recomendaciones", TA),
                _f("evidence_photos", "Fotos de Evidencia", PHOTO),
                _f("technician_signature", "Firma Técnico", SIG, True),
            ],
        ),
        PdfTemplateEntity(
            name="Instalación & Puesta en Marcha",
            description="Formato para instalaciones y puesta en marcha",
            slug="instalacion-puesta-marcha",
            category="installation",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("equipment_installed", "Equipo Instalado", T, True),
                _f("installation_location", "Ubicación de Instalación", T, True),
                _f("installation_date", "Fecha de Instalación", DATE, True),
                _f("configuration_details", "Detalles de Configuración", TA, True),
                _f("tests_performed", "Pruebas Realizadas", TA, True),
                _f(
                    "test_results", "Resultados de Pruebas", SEL, True,
                    ["Satisfactorio", "Con observaciones", "Fallido"],
                ),
                _f("client_training", "Capacitación al Cliente", CHK),
                _f("installation_photos", "Fotos de Instalación", PHOTO),
                _f("technician_signature", "Firma Técnico", SIG, True),
                _f("client_signature", "Firma Cliente", SIG, True),
            ],
        ),
        PdfTemplateEntity(
            name="Mantenimiento P/C Multiequipo",
            description="Formato para mantenimiento preventivo/correctivo de múltiples equipos",
            slug="mantenimiento-pc-multiequipo",
            category="maintenance",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f(
                    "maintenance_type", "Tipo de Mantenimiento", SEL, True,
                    ["Preventivo", "Correctivo", "Predictivo"],
                ),
                _f("equipment_list", "Lista de Equipos", TA, True),
                _f("activities_performed", "Actividades Realizadas", TA, True),
                _f("parts_replaced", "Partes Reemplazadas", TA),
                _f("consumables_used", "Consumibles Utilizados", TA),
                _f("next_maintenance", "Próximo Mantenimiento", DATE),
                _f("observations", "Observaciones", TA),
                _f("technician_signature", "Firma Técnico", SIG, True),
                _f("supervisor_signature", "Firma Supervisor", SIG),
            ],
        ),
        PdfTemplateEntity(
            name="Servicio Técnico & Soporte",
            description="Formato para servicios técnicos y soporte",
            slug="servicio-tecnico-soporte",
            category="support",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("ticket_number", "Número de Ticket", T, True),
                _f(
                    "issue_category", "Categoría del Problema", SEL, True,
                    ["Hardware", "Software", "Red", "Configuración", "Otro"],
                ),
                _f(
                    "issue_priority", "Prioridad", SEL, True,
                    ["Baja", "Media", "Alta", "Crítica"],
                ),
                _f("issue_description", "Descripción del Problema", TA, True),
                _f("solution_applied", "Solución Aplicada", TA, True),
                _f("time_spent", "Tiempo Empleado (horas)", NUM, True),
                _f("remote_support", "Soporte Remoto", CHK),
                _f(
                    "issue_resolved", "Problema Resuelto", SEL, True,
                    ["Sí", "Parcialmente", "No", "Pendiente"],
                ),
                _f("technician_signature", "Firma Técnico", SIG, True),
                _f("client_signature", "Firma Cliente", SIG, True),
            ],
        ),
        PdfTemplateEntity(
            name="Inventario & Hoja de Vida de Activos",
            description="Formato para gestión de inventarios y activos",
            slug="inventario-hoja-vida-activos",
            category="inventory",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("asset_code", "Código de Activo", T, True),
                _f("asset_description", "Descripción del Activo", T, True),
                _f("asset_location", "Ubicación", T, True),
                _f(
                    "asset_condition", "Estado del Activo", SEL, True,
                    ["Excelente", "Bueno", "Regular", "Malo", "Fuera de Servicio"],
                ),
                _f("last_maintenance", "Último Mantenimiento", DATE),
                _f("asset_value", "Valor del Activo", NUM),
                _f("responsible_person", "Persona Responsable", T, True),
                _f("asset_photo", "Foto del Activo", PHOTO),
                _f("notes", "Observaciones", TA),
                _f("technician_signature", "Firma Técnico", SIG, True),
            ],
        ),
        PdfTemplateEntity(
            name="Movimientos de Materiales & Herramientas",
            description="Formato para control de materiales y herramientas",
            slug="movimientos-materiales-herramientas",
            category="materials",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f(
                    "movement_type", "Tipo de Movimiento", SEL, True,
                    ["Entrada", "Salida", "Transferencia", "Devolución"],
                ),
                _f("movement_date", "Fecha de Movimiento", DATE, True),
                _f("materials_list", "Lista de Materiales", TA, True),
                _f("quantities", "Cantidades", TA, True),
                _f("origin_location", "Ubicación de Origen", T, True),
                _f("destination_location", "Ubicación de Destino", T, True),
                _f("authorized_by", "Autorizado por", T, True),
                _f("received_by", "Recibido por", T),
                _f("technician_signature", "Firma Técnico", SIG, True),
                _f("receiver_signature", "Firma Receptor", SIG),
            ],
        ),
        PdfTemplateEntity(
            name="Listado Maestro de Documentos y Registros",
            description="Formato para control de documentos y registros",
            slug="listado-maestro-documentos",
            category="documents",
            created_by=SYSTEM_USER_ID,
            fields=[
                _f("document_code", "Código de Documento", T, True),
                _f("document_title", "Título del Documento", T, True),
                _f(
                    "document_type", "Tipo de Documento", SEL, True,
                    ["Manual", "Procedimiento", "Instructivo", "Formato", "Registro", "Política"],
                ),
                _f("version", "Versión", T, True),
                _f("approval_date", "Fecha de Aprobación", DATE, True),
                _f("effective_date", "Fecha de Vigencia", DATE, True),
                _f("review_date", "Fecha de Revisión", DATE),
                _f("responsible_area", "Área Responsable", T, True),
                _f("distribution_list", "Lista de Distribución", TA),
                _f("document_location", "Ubicación del Documento", T, True),
                _f("technician_signature", "Firma Técnico", SIG, True),
            ],
        ),
    ]
