"""CSV exports for the admin."""
import csv
import io

from flask import send_file

from aidconnect.models import NGO_PUBLIC_FIELDS, NGOS, REQUEST_EXPORT_FIELDS, UPLOADS


def records_to_csv(records, fields) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, extrasaction='ignore',
                            quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writeheader()
    for record in records:
        writer.writerow({field: record.get(field, '') for field in fields})
    return output.getvalue()


def _csv_response(text: str, filename: str):
    return send_file(
        io.BytesIO(text.encode('utf-8')),
        mimetype='text/csv',
        as_attachment=True,
        download_name=filename
    )


def export_ngos(store):
    return _csv_response(records_to_csv(store.load_all(NGOS), NGO_PUBLIC_FIELDS), 'ngo_users.csv')


def export_requests(store):
    return _csv_response(records_to_csv(store.load_all(UPLOADS), REQUEST_EXPORT_FIELDS), 'aid_uploads.csv')
