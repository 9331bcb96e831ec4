from .models import Institute


def find_institute(institute_id):
    """Look up a tenant by its public id; ids are stored upper-case."""
    key = str(institute_id or "").strip().upper()
    if not key:
        return None
    return Institute.objects.filter(institute_id=key).first()
