"""
Tests for account endpoints: sign-up, own profile, password change,
token login and the administrator user list.
"""

import pytest
from django.contrib.auth.models import User
from rest_framework.authtoken.models import Token

from users.models import Profile


@pytest.mark.django_db
class TestProfileModel:

    def test_profile_created_with_user(self):
        user = User.objects.create_user(username="new@example.com", password="S3cure-pass!")

        assert Profile.objects.filter(user=user).exists()
        assert user.profile.role == Profile.ROLE_SELLER
        assert user.profile.is_admin is False

    def test_staff_user_counts_as_admin(self):
        user = User.objects.create_user(username="staff@example.com", password="x", is_staff=True)

        assert user.profile.is_admin is True


@pytest.mark.django_db
class TestRegister:
    url = "/api/users/register/"

    def test_register_creates_seller_with_email_login(self, api_client):
        response = api_client.post(self.url, {
            "name": "Ana",
            "email": "  Ana@Example.COM ",
            "phone": "11999998888",
            "password": "Sup3r-secret-9",
        }, format="json")

        assert response.status_code == 201
        assert response.data["username"] == "ana@example.com"
        assert response.data["role"] == "seller"

        user = User.objects.get(username="ana@example.com")
        assert user.email == "ana@example.com"
        assert user.first_name == "Ana"
        assert user.profile.phone == "11999998888"
        assert user.check_password("Sup3r-secret-9")

    def test_duplicate_email_rejected(self, api_client, seller):
        response = api_client.post(self.url, {
            "name": "Again",
            "email": "SELLER@example.com",
            "phone": "11999998888",
            "password": "Sup3r-secret-9",
        }, format="json")

        assert response.status_code == 400
        assert "email" in response.data

    def test_weak_password_rejected(self, api_client):
        response = api_client.post(self.url, {
            "name": "Weak",
            "email": "weak@example.com",
            "phone": "11999998888",
            "password": "12345678",
        }, format="json")

        assert response.status_code == 400
        assert "password" in response.data
        assert not User.objects.filter(username="weak@example.com").exists()


@pytest.mark.django_db
class TestTokenLogin:

    def test_token_issued_for_email_and_password(self, api_client, seller):
        response = api_client.post("/api/auth/token/", {
            "username": "seller@example.com",
            "password": "S3cure-pass!",
        }, format="json")

        assert response.status_code == 200
        assert response.data["token"] == Token.objects.get(user=seller).key

    def test_token_authenticates_requests(self, api_client, seller):
        token = Token.objects.create(user=seller)
        api_client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

        response = api_client.get("/api/users/me/")

        assert response.status_code == 200
        assert response.data["email"] == "seller@example.com"


@pytest.mark.django_db
class TestMe:
    url = "/api/users/me/"

    def test_requires_authentication(self, api_client):
        assert api_client.get(self.url).status_code in (401, 403)

    def test_update_profile_and_messaging_settings(self, auth_client, seller):
        response = auth_client.patch(self.url, {
            "name": "Renamed",
            "phone": "11911112222",
            "whatsapp_secret": "secret-token",
            "whatsapp_account": "12345",
        }, format="json")

        assert response.status_code == 200
        assert response.data["name"] == "Renamed"
        assert response.data["whatsapp_configured"] is True
        assert "whatsapp_secret" not in response.data

        seller.refresh_from_db()
        assert seller.first_name == "Renamed"
        assert seller.profile.phone == "11911112222"
        assert seller.profile.whatsapp_secret == "secret-token"

    def test_changing_email_changes_login(self, auth_client, seller):
        response = auth_client.patch(self.url, {"email": "New@Example.com"}, format="json")

        assert response.status_code == 200
        seller.refresh_from_db()
        assert seller.username == "new@example.com"
        assert seller.email == "new@example.com"

    def test_email_taken_by_someone_else(self, auth_client, other_seller):
        response = auth_client.patch(self.url, {"email": "other@example.com"}, format="json")

        assert response.status_code == 400


@pytest.mark.django_db
class TestPasswordChange:
    url = "/api/users/me/password/"

    def test_change_password(self, auth_client, seller):
        response = auth_client.post(self.url, {
            "current_password": "S3cure-pass!",
            "new_password": "An0ther-strong-one",
        }, format="json")

        assert response.status_code == 200
        assert response.data["success"] is True
        seller.refresh_from_db()
        assert seller.check_password("An0ther-strong-one")

    def test_wrong_current_password(self, auth_client, seller):
        response = auth_client.post(self.url, {
            "current_password": "wrong",
            "new_password": "An0ther-strong-one",
        }, format="json")

        assert response.status_code == 400
        assert "current_password" in response.data


@pytest.mark.django_db
class TestUserAdministration:
    url = "/api/users/users/"

    def test_sellers_cannot_list_users(self, auth_client):
        assert auth_client.get(self.url).status_code == 403

    def test_admin_lists_users(self, client_for, store_admin, seller):
        response = client_for(store_admin).get(self.url)

        assert response.status_code == 200
        usernames = {row["username"] for row in response.data["results"]}
        assert {"admin@example.com", "seller@example.com"} <= usernames

    def test_admin_deletes_user(self, client_for, store_admin, seller):
        response = client_for(store_admin).delete(f"{self.url}{seller.pk}/")

        assert response.status_code == 204
        assert not User.objects.filter(pk=seller.pk).exists()

    def test_admin_cannot_delete_self(self, client_for, store_admin):
        response = client_for(store_admin).delete(f"{self.url}{store_admin.pk}/")

        assert response.status_code == 400
        assert response.data["success"] is False
        assert User.objects.filter(pk=store_admin.pk).exists()
