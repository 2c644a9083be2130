"""CSV export utilities."""
import csv

from django.http import HttpResponse


def rows_to_csv_response(rows, columns, filename):
    """Convert an iterable of objects to a CSV HttpResponse.

    Args:
        rows: any iterable (list of report rows, queryset, ...)
        columns: list of (attribute_or_callable, header_label) tuples.
            A string is resolved with ``getattr`` (dotted paths allowed);
            a callable is called with the row.
        filename: download filename (without extension)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow([col[1] for col in columns])

    for obj in rows:
        line = []
        for field, _ in columns:
            if callable(field):
                value = field(obj)
            else:
                value = obj
                for part in field.split("."):
                    value = getattr(value, part, None)
                    if value is None:
                        break
            line.append("" if value is None else str(value))
        writer.writerow(line)

    return response
