import io
import logging
from xml.sax.saxutils import escape

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from .exceptions import DocumentRenderError

logger = logging.getLogger(__name__)

CERTIFICATES_DIR = 'certificates'

TABLE_STYLE = TableStyle([
    ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
    ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
    ('GRID', (0, 0), (-1, -1), 1, colors.black),
])


def _display(value, suffix=''):
    if value in (None, ''):
        return '-'
    return f"{value}{suffix}"


class CertificateRenderer:
    """Render a certificate fact bundle to PDF and store it in default_storage"""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def build_pdf(self, facts):
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=facts['certificate']['code'])
        elements = []

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'CertificateTitle',
            parent=styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=1
        )

        certificate = facts['certificate']
        product = facts['product']
        record = facts['production_record']
        control = facts['quality_control']

        elements.append(Paragraph("Certificado de Calidad", title_style))
        elements.append(Paragraph(f"Código: {certificate['code']}", styles['Normal']))
        elements.append(Paragraph(f"Emitido: {certificate['approved_at']}", styles['Normal']))
        elements.append(Paragraph(escape(f"Aprobado por: {certificate['approved_by']}"), styles['Normal']))
        elements.append(Spacer(1, 16))

        elements.append(Paragraph("Producto y lote", styles['Heading2']))
        lot_table = Table([
            ['Producto', 'Código', 'Lote', 'Fecha', 'Turno', 'Línea'],
            [
                product['name'], product['code'], record['lot_number'],
                record['production_date'], record['shift'], _display(record['production_line']),
            ],
        ])
        lot_table.setStyle(TABLE_STYLE)
        elements.append(lot_table)
        elements.append(Spacer(1, 12))

        totals_table = Table([
            ['Producido', 'Aprobado', 'Rechazado', 'Merma'],
            [
                record['total_produced'], record['total_approved'],
                record['total_rejected'], f"{control['waste_percentage']}%",
            ],
        ])
        totals_table.setStyle(TABLE_STYLE)
        elements.append(totals_table)
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Mediciones", styles['Heading2']))
        measurements = [
            ['Peso (g)', 'Diámetro (mm)', 'Altura (mm)', 'Ancho (mm)'],
            [
                _display(control['weight']), _display(control['diameter']),
                _display(control['height']), _display(control['width']),
            ],
        ]
        measurements_table = Table(measurements)
        measurements_table.setStyle(TABLE_STYLE)
        elements.append(measurements_table)

        for name, value in control['other_measurements']:
            elements.append(Paragraph(escape(f"{name}: {value}"), styles['Normal']))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Defectos", styles['Heading2']))
        defect_rows = [['Tipo', 'Cantidad', 'Descripción']]
        for defect in facts['defects']:
            defect_rows.append([defect['defect_type'], defect['quantity'], _display(defect['description'])])
        if len(defect_rows) == 1:
            defect_rows.append(['-', 0, 'Sin defectos registrados'])
        defects_table = Table(defect_rows)
        defects_table.setStyle(TABLE_STYLE)
        elements.append(defects_table)
        elements.append(Spacer(1, 12))

        verdict = "APROBADO" if control['approved'] else "NO APROBADO"
        elements.append(Paragraph(f"Resultado de inspección: {verdict}", styles['Heading3']))
        if control['notes']:
            elements.append(Paragraph(escape(control['notes']), styles['Normal']))

        doc.build(elements)
        return buffer.getvalue()

    def render(self, facts):
        """
        Render and store the certificate document

        Returns:
            str: storage name of the saved PDF

        Raises:
            DocumentRenderError: when building or storing the PDF fails
        """
        code = facts['certificate']['code']
        try:
            content = self.build_pdf(facts)
            return self.storage.save(f"{CERTIFICATES_DIR}/{code}.pdf", ContentFile(content))
        except Exception as exc:
            logger.exception("Error al generar el PDF del certificado %s", code)
            raise DocumentRenderError(f"No se pudo generar el documento del certificado {code}") from exc

    def discard(self, name):
        """Remove a stored document, ignoring missing files"""
        if name and self.storage.exists(name):
            self.storage.delete(name)
