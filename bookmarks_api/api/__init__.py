from flask import request


def register_blueprints(app):
    from bookmarks_api.api.users import bp as users_bp
    from bookmarks_api.api.bookmarks import bp as bookmarks_bp
    from bookmarks_api.api.auth import bp as auth_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(bookmarks_bp)
    app.register_blueprint(auth_bp)


def json_string_fields(*names):
    """Read required string fields from the JSON body.

    Returns (values, None) on success or (None, message) when the body is not
    a JSON object or a field is missing, empty or not a string.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, 'Invalid request body'

    values = []
    for name in names:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            return None, f'{name} is required'
        values.append(value)
    return values, None
