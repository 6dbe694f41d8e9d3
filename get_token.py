import sys

from flask_jwt_extended import create_access_token

from molefit import create_app
from molefit.models import User

# Issue an access token for an existing account, for trying the API from curl
email = sys.argv[1] if len(sys.argv) > 1 else "dr.smith@molefit.dev"


def get_access_token(email):
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=email.lower().strip()).first()
        if not user:
            print("❌ No user with email", email)
            return None
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        print("✅ Access token:", token)
        return token


if __name__ == "__main__":
    get_access_token(email)
