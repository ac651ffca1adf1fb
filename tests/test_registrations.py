from app.services.storage import ArtifactGateway

PDF_BYTES = b"%PDF-1.4 resume"


def register(client, email="asha@example.com", filename="resume.pdf", content=PDF_BYTES, **fields):
    data = {"fullName": "Asha Rao", "email": email, "phone": "9876543210", "roles": "Data Analyst"}
    data.update(fields)
    files = {"cv": (filename, content, "application/pdf")} if filename else None
    return client.post("/api/registrations", data=data, files=files)


def test_register_and_download_embedded_cv(client, notifier):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["cv"]["kind"] == "embedded"
    assert body["cv"]["url"] == f"/api/registrations/{body['id']}/cv"

    download = client.get(f"/api/registrations/{body['id']}/cv")
    assert download.status_code == 200
    assert download.content == PDF_BYTES
    assert download.headers["content-type"] == "application/pdf"
    assert 'filename="Asha_Rao_CV.pdf"' in download.headers["content-disposition"]

    assert notifier.registrations == [{"id": body["id"], "full_name": "Asha Rao", "email": "asha@example.com"}]


def test_listing_never_includes_file_content(client):
    register(client)
    listed = client.get("/api/registrations").json()
    assert len(listed) == 1
    assert listed[0]["cv_name"] == "resume.pdf"
    assert listed[0]["roles"] == "Data Analyst"
    assert "data" not in listed[0]


def test_role_is_accepted_as_roles(client):
    registration_id = register(client, roles="", role="Designer").json()["id"]
    assert client.get(f"/api/registrations/{registration_id}").json()["roles"] == "Designer"


def test_duplicate_email(client):
    register(client)
    response = register(client)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email already exists"


def test_missing_cv(client):
    response = register(client, filename=None)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Full name, email, and CV file are required"


def test_unsupported_cv_type(client):
    response = register(client, filename="resume.exe")
    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith("Unsupported file type")


def test_empty_cv(client):
    response = register(client, content=b"")
    assert response.status_code == 400


def test_local_cv_round_trip_and_delete(client, storage_config, use_gateway, uploads_dir):
    use_gateway(ArtifactGateway(storage_config.model_copy(update={"embedded_categories": []})))

    body = register(client, filename="resume.docx").json()
    assert body["cv"]["kind"] == "local"
    stored = list((uploads_dir / "registrations").iterdir())
    assert len(stored) == 1
    assert stored[0].suffix == ".docx"

    download = client.get(f"/api/registrations/{body['id']}/cv")
    assert download.content == PDF_BYTES
    assert 'filename="Asha_Rao_CV.docx"' in download.headers["content-disposition"]

    assert client.delete(f"/api/registrations/{body['id']}").status_code == 200
    assert not stored[0].exists()
    assert client.get(f"/api/registrations/{body['id']}").status_code == 404


def test_remote_cv_redirects(client, remote_config, fake_s3, use_gateway):
    use_gateway(ArtifactGateway(remote_config, s3_client=fake_s3))

    body = register(client).json()
    assert body["cv"]["kind"] == "remote"
    assert body["cv"]["url"].startswith("https://cdn.example.com/registrations/")

    download = client.get(f"/api/registrations/{body['id']}/cv", follow_redirects=False)
    assert download.status_code == 302
    assert download.headers["location"] == body["cv"]["url"]


def test_remote_cv_proxied(client, remote_config, fake_s3, use_gateway):
    config = remote_config.model_copy(update={"remote_download_mode": "proxy"})
    use_gateway(ArtifactGateway(config, s3_client=fake_s3))

    body = register(client).json()
    download = client.get(f"/api/registrations/{body['id']}/cv")
    assert download.status_code == 200
    assert download.content == PDF_BYTES


def test_duplicate_email_leaves_no_orphan(client, remote_config, fake_s3, use_gateway):
    use_gateway(ArtifactGateway(remote_config, s3_client=fake_s3))
    register(client)
    register(client)
    assert len(fake_s3.objects) == 1


def test_unknown_registration(client):
    assert client.get("/api/registrations/42/cv").status_code == 404
    assert client.delete("/api/registrations/42").json()["error"]["code"] == "not_found"


def test_users_alias(client):
    registration_id = register(client).json()["id"]
    users = client.get("/api/users").json()
    assert [u["id"] for u in users] == [registration_id]
    assert client.get(f"/api/users/{registration_id}").json()["email"] == "asha@example.com"
