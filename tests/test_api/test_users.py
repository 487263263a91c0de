"""
Tests para la administración de usuarios (/users).
"""

import json

from fastapi import status


class TestUsersAdmin:
    def test_admin_crea_usuario_con_rol(self, client, auth_headers_admin):
        response = client.post(
            "/users/",
            json={
                "username": "editora",
                "name": "Editora",
                "email": "editora@example.com",
                "password": "secreto123",
                "role": "content-manager",
            },
            headers=auth_headers_admin,
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["role"] == "content-manager"

        login = client.post("/auth/login", json={"username": "editora", "password": "secreto123"})
        assert "prueba:delete" in login.json()["permissions"]

    def test_rol_desconocido(self, client, auth_headers_admin):
        response = client.post(
            "/users/",
            json={"username": "otro", "name": "Otro", "password": "secreto123", "role": "root"},
            headers=auth_headers_admin,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_listado_no_expone_credenciales(self, client, auth_headers_developer, basic_user):
        response = client.get("/users/", params={"page": 1}, headers=auth_headers_developer)

        assert response.status_code == status.HTTP_200_OK
        for user in response.json()["data"]:
            assert "password_hash" not in user
            assert "password_salt" not in user

    def test_filtro_por_hash_se_ignora(self, client, auth_headers_admin, basic_user):
        filters = json.dumps({"password_hash": {"$exists": False}})
        response = client.get("/users/", params={"page": 1, "filters": filters}, headers=auth_headers_admin)
        assert response.json()["pagination"]["totalFilteredRows"] == 2

    def test_developer_no_puede_crear(self, client, auth_headers_developer):
        response = client.post(
            "/users/",
            json={"username": "otro", "name": "Otro", "password": "secreto123", "role": "admin"},
            headers=auth_headers_developer,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_no_puede_cambiar_su_propio_rol(self, client, auth_headers_admin, admin_user):
        response = client.put(
            f"/users/{admin_user.id}",
            json={"role": "user"},
            headers=auth_headers_admin,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "No puede cambiar su propio rol"

    def test_cambio_de_password(self, client, auth_headers_admin, basic_user):
        response = client.put(
            f"/users/{basic_user.id}",
            json={"password": "nueva-clave"},
            headers=auth_headers_admin,
        )
        assert response.status_code == status.HTTP_200_OK

        assert client.post("/auth/login", json={"username": "testuser", "password": "password123"}).status_code == 400
        assert client.post("/auth/login", json={"username": "testuser", "password": "nueva-clave"}).status_code == 200

    def test_soft_delete_bloquea_login(self, client, auth_headers_admin, basic_user):
        response = client.patch(f"/users/{basic_user.id}/soft-delete", headers=auth_headers_admin)
        assert response.status_code == status.HTTP_200_OK

        login = client.post("/auth/login", json={"username": "testuser", "password": "password123"})
        assert login.status_code == status.HTTP_403_FORBIDDEN
