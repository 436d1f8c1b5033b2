"""HTTP tests for datasets, datablocks and attachments, focused on ownership."""
import json

from conftest import dataset_payload


def create_dataset(client, headers, **overrides):
    response = client.post("/datasets", json=dataset_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def datablock_payload(**overrides):
    payload = {
        "archive_id": "archive-001.tar",
        "size": 2048,
        "packed_size": 1024,
        "chk_alg": "sha256",
        "version": "1",
        "owner_group": "p1234",
        "data_file_list": [
            {"path": "run42/scan1.nxs", "size": 1024, "time": "2024-03-02T10:00:00Z"},
            {"path": "run42/scan2.nxs", "size": 1024, "time": "2024-03-02T10:05:00Z"},
        ],
    }
    payload.update(overrides)
    return payload


class TestDatasetOwnership:

    def test_creator_becomes_owner(self, client, alice_headers):
        dataset = create_dataset(client, alice_headers)

        assert dataset["created_by"] == "alice"
        assert len(dataset["pid"]) == 26

    def test_owner_can_update_own_dataset(self, client, alice_headers):
        dataset = create_dataset(client, alice_headers)

        response = client.patch(f"/datasets/{dataset['pid']}", json={"description": "Calibrated"}, headers=alice_headers)

        assert response.status_code == 200
        assert response.json()["description"] == "Calibrated"

    def test_other_user_cannot_update(self, client, alice_headers, bob_headers):
        dataset = create_dataset(client, alice_headers)

        response = client.patch(f"/datasets/{dataset['pid']}", json={"description": "Mine now"}, headers=bob_headers)

        assert response.status_code == 403
        unchanged = client.get(f"/datasets/{dataset['pid']}", headers=alice_headers).json()
        assert unchanged["description"] == "Reflectivity scan"

    def test_ingestor_can_update_any_dataset(self, client, alice_headers, ingestor_headers):
        dataset = create_dataset(client, alice_headers)

        response = client.patch(f"/datasets/{dataset['pid']}", json={"is_published": True}, headers=ingestor_headers)

        assert response.status_code == 200
        assert response.json()["is_published"] is True
        assert response.json()["updated_by"] == "ingestor"

    def test_delete_own_and_others(self, client, alice_headers, bob_headers, archivemanager_headers):
        mine = create_dataset(client, alice_headers)
        other = create_dataset(client, alice_headers, dataset_name="Other")

        assert client.delete(f"/datasets/{mine['pid']}", headers=bob_headers).status_code == 403
        assert client.delete(f"/datasets/{mine['pid']}", headers=alice_headers).status_code == 200
        assert client.delete(f"/datasets/{other['pid']}", headers=archivemanager_headers).status_code == 200
        assert client.get(f"/datasets/{mine['pid']}", headers=alice_headers).status_code == 404

    def test_update_cannot_clear_required_fields(self, client, alice_headers):
        dataset = create_dataset(client, alice_headers)

        response = client.patch(f"/datasets/{dataset['pid']}", json={"size": None}, headers=alice_headers)

        assert response.status_code == 400
        assert "size" in response.json()
        assert client.get(f"/datasets/{dataset['pid']}", headers=alice_headers).json()["size"] == 2048

    def test_deleting_dataset_removes_its_datablocks_and_attachments(
        self, client, alice_headers, ingestor_headers, admin_headers
    ):
        dataset = create_dataset(client, alice_headers)
        datablock = client.post(
            f"/datasets/{dataset['pid']}/datablocks", json=datablock_payload(), headers=ingestor_headers
        ).json()
        attachment = client.post(
            f"/datasets/{dataset['pid']}/attachments",
            json={"thumbnail": "data:image/png;base64,AAAA", "owner_group": "p1234"},
            headers=alice_headers,
        ).json()

        assert client.delete(f"/datasets/{dataset['pid']}", headers=alice_headers).status_code == 200

        assert client.get("/datablocks", params={"dataset_id": dataset["pid"]}, headers=admin_headers).json() == []
        assert client.get(f"/datablocks/{datablock['id']}", headers=admin_headers).status_code == 404
        assert client.get(f"/attachments/{attachment['id']}", headers=admin_headers).status_code == 404

    def test_anonymous_gets_forbidden_not_not_found(self, client):
        assert client.patch("/datasets/missing", json={"description": "x"}).status_code == 403

    def test_missing_dataset(self, client, alice_headers):
        assert client.patch("/datasets/missing", json={"description": "x"}, headers=alice_headers).status_code == 404


class TestDatasetQueries:

    def test_list_filters_by_type_and_boolean(self, client, alice_headers):
        create_dataset(client, alice_headers, dataset_name="raw-1")
        create_dataset(client, alice_headers, dataset_name="derived-1", type="derived", is_published=True)

        derived = client.get("/datasets", params={"type": "derived"}, headers=alice_headers).json()
        published = client.get("/datasets", params={"is_published": "true"}, headers=alice_headers).json()
        both = client.get("/datasets", params=[("type", "raw"), ("type", "derived")], headers=alice_headers).json()

        assert [d["dataset_name"] for d in derived] == ["derived-1"]
        assert [d["dataset_name"] for d in published] == ["derived-1"]
        assert len(both) == 2

    def test_list_with_uncoercible_value(self, client, alice_headers):
        response = client.get("/datasets", params={"size": "large"}, headers=alice_headers)

        assert response.status_code == 400

    def test_fullquery_range(self, client, alice_headers):
        create_dataset(client, alice_headers, dataset_name="early", creation_time="2024-01-01T00:00:00Z")
        create_dataset(client, alice_headers, dataset_name="late", creation_time="2024-06-01T00:00:00Z")

        response = client.get(
            "/datasets/fullquery",
            params={"fields": json.dumps({"creation_time": {"begin": "2024-05-01T00:00:00Z"}})},
            headers=alice_headers,
        )

        assert response.status_code == 200
        assert [d["dataset_name"] for d in response.json()] == ["late"]

    def test_fullfacet_by_type(self, client, alice_headers):
        create_dataset(client, alice_headers)
        create_dataset(client, alice_headers, type="derived")
        create_dataset(client, alice_headers, type="derived")

        response = client.get("/datasets/fullfacet", params={"facets": '["type"]'}, headers=alice_headers)

        assert response.json() == [{
            "all": [{"totalSets": 3}],
            "type": [{"_id": "derived", "count": 2}, {"_id": "raw", "count": 1}],
        }]

    def test_structured_filter_values_are_bad_requests(self, client, alice_headers):
        create_dataset(client, alice_headers)

        for fields in ({"owner_group": [{"a": 1}]}, {"size": {"begin": [1]}}, {"is_published": [[True]]}):
            response = client.get("/datasets/fullquery", params={"fields": json.dumps(fields)}, headers=alice_headers)
            assert response.status_code == 400, fields

        response = client.get("/datasets/fullfacet", params={"facets": json.dumps([{"a": 1}])}, headers=alice_headers)
        assert response.status_code == 400

    def test_invalid_type_is_rejected(self, client, alice_headers):
        response = client.post("/datasets", json=dataset_payload(type="simulated"), headers=alice_headers)

        assert response.status_code == 400


class TestDatablocks:

    def test_nested_create_and_list(self, client, alice_headers, ingestor_headers):
        dataset = create_dataset(client, alice_headers)

        assert client.post(
            f"/datasets/{dataset['pid']}/datablocks", json=datablock_payload(), headers=alice_headers
        ).status_code == 403

        created = client.post(
            f"/datasets/{dataset['pid']}/datablocks", json=datablock_payload(), headers=ingestor_headers
        )
        assert created.status_code == 201
        assert created.json()["dataset_id"] == dataset["pid"]
        assert created.json()["data_file_list"][0]["path"] == "run42/scan1.nxs"

        listed = client.get(f"/datasets/{dataset['pid']}/datablocks", headers=alice_headers)
        assert [b["id"] for b in listed.json()] == [created.json()["id"]]

    def test_datablock_crud(self, client, alice_headers, ingestor_headers, archivemanager_headers):
        dataset = create_dataset(client, alice_headers)
        created = client.post(
            "/datablocks", json=datablock_payload(dataset_id=dataset["pid"]), headers=ingestor_headers
        ).json()

        assert client.get(f"/datablocks/{created['id']}", headers=alice_headers).status_code == 200
        assert client.get("/datablocks", params={"dataset_id": dataset["pid"]}, headers=alice_headers).json()

        updated = client.patch(f"/datablocks/{created['id']}", json={"version": "2"}, headers=ingestor_headers)
        assert updated.json()["version"] == "2"
        assert client.patch(f"/datablocks/{created['id']}", json={"version": "3"}, headers=alice_headers).status_code == 403

        assert client.delete(f"/datablocks/{created['id']}", headers=ingestor_headers).status_code == 403
        assert client.delete(f"/datablocks/{created['id']}", headers=archivemanager_headers).status_code == 200
        assert client.get(f"/datablocks/{created['id']}", headers=alice_headers).status_code == 404

    def test_datablock_on_missing_dataset(self, client, ingestor_headers):
        response = client.post("/datasets/missing/datablocks", json=datablock_payload(), headers=ingestor_headers)

        assert response.status_code == 404

    def test_top_level_datablock_for_missing_dataset(self, client, ingestor_headers, admin_headers):
        response = client.post("/datablocks", json=datablock_payload(dataset_id="NOPE"), headers=ingestor_headers)

        assert response.status_code == 400
        assert client.get("/datablocks", headers=admin_headers).json() == []


class TestAttachments:

    def attach(self, client, headers, pid):
        response = client.post(
            f"/datasets/{pid}/attachments",
            json={"thumbnail": "data:image/png;base64,AAAA", "caption": "Detector image", "owner_group": "p1234"},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_owner_updates_own_attachment(self, client, alice_headers, bob_headers):
        dataset = create_dataset(client, alice_headers)
        attachment = self.attach(client, alice_headers, dataset["pid"])

        assert client.patch(
            f"/attachments/{attachment['id']}", json={"caption": "Mine"}, headers=bob_headers
        ).status_code == 403
        response = client.patch(f"/attachments/{attachment['id']}", json={"caption": "Updated"}, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["caption"] == "Updated"

    def test_listing_and_deleting(self, client, alice_headers, admin_headers):
        dataset = create_dataset(client, alice_headers)
        attachment = self.attach(client, alice_headers, dataset["pid"])

        listed = client.get(f"/datasets/{dataset['pid']}/attachments", headers=alice_headers).json()
        assert [a["dataset_id"] for a in listed] == [dataset["pid"]]

        assert client.delete(f"/attachments/{attachment['id']}", headers=alice_headers).status_code == 403
        assert client.delete(f"/attachments/{attachment['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/attachments/{attachment['id']}", headers=alice_headers).status_code == 404


class TestDatasetVisibility:

    def test_users_list_only_their_groups_datasets(self, client, alice_headers, bob_headers):
        create_dataset(client, alice_headers, dataset_name="alice-run")
        create_dataset(client, bob_headers, dataset_name="bob-run", owner_group="p5678")

        alice_sees = client.get("/datasets", headers=alice_headers).json()
        bob_sees = client.get("/datasets/fullquery", headers=bob_headers).json()

        assert [d["dataset_name"] for d in alice_sees] == ["alice-run"]
        assert [d["dataset_name"] for d in bob_sees] == ["bob-run"]

    def test_requested_filter_cannot_widen_the_scope(self, client, alice_headers, bob_headers):
        create_dataset(client, alice_headers)

        response = client.get("/datasets", params={"owner_group": "p1234"}, headers=bob_headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_facets_count_only_visible_datasets(self, client, alice_headers, bob_headers):
        create_dataset(client, alice_headers)
        create_dataset(client, bob_headers, owner_group="p5678")

        response = client.get("/datasets/fullfacet", params={"facets": '["owner_group"]'}, headers=bob_headers)

        assert response.json() == [{
            "all": [{"totalSets": 1}],
            "owner_group": [{"_id": "p5678", "count": 1}],
        }]

    def test_listall_roles_see_everything(self, client, alice_headers, bob_headers, archivemanager_headers, ingestor_headers):
        create_dataset(client, alice_headers)
        create_dataset(client, bob_headers, owner_group="p5678")

        assert len(client.get("/datasets", headers=archivemanager_headers).json()) == 2
        assert len(client.get("/datasets", headers=ingestor_headers).json()) == 2

    def test_reading_another_groups_dataset(self, client, alice_headers, bob_headers, archivemanager_headers):
        dataset = create_dataset(client, alice_headers)

        assert client.get(f"/datasets/{dataset['pid']}", headers=bob_headers).status_code == 403
        assert client.get(f"/datasets/{dataset['pid']}", headers=archivemanager_headers).status_code == 200

    def test_roles_without_dataset_read_cannot_list(self, client, norole_headers):
        assert client.get("/datasets", headers=norole_headers).status_code == 403


class TestScientificConditions:

    def seed(self, client, headers):
        create_dataset(client, headers, dataset_name="cold", scientific_metadata={
            "temperature": {"value": 4.2, "unit": "K"},
            "sample": {"value": "MnSi"},
        })
        create_dataset(client, headers, dataset_name="warm", scientific_metadata={
            "temperature": {"value": 300, "unit": "K"},
            "sample": {"value": "Fe3O4"},
        })
        create_dataset(client, headers, dataset_name="no-metadata")

    def query(self, client, headers, *conditions):
        response = client.get(
            "/datasets/fullquery",
            params={"fields": json.dumps({"scientific": list(conditions)})},
            headers=headers,
        )
        return response

    def test_numeric_relations(self, client, alice_headers):
        self.seed(client, alice_headers)

        below = self.query(client, alice_headers, {"lhs": "temperature", "relation": "LESS_THAN", "rhs": 100})
        above = self.query(client, alice_headers, {"lhs": "temperature", "relation": "GREATER_THAN", "rhs": 100})
        exact = self.query(client, alice_headers, {"lhs": "temperature", "relation": "EQUAL_TO_NUMERIC", "rhs": 300})

        assert [d["dataset_name"] for d in below.json()] == ["cold"]
        assert [d["dataset_name"] for d in above.json()] == ["warm"]
        assert [d["dataset_name"] for d in exact.json()] == ["warm"]

    def test_string_equality_and_unit(self, client, alice_headers):
        self.seed(client, alice_headers)

        by_sample = self.query(client, alice_headers, {"lhs": "sample", "relation": "EQUAL_TO", "rhs": "MnSi"})
        wrong_unit = self.query(
            client, alice_headers, {"lhs": "temperature", "relation": "LESS_THAN", "rhs": 100, "unit": "mK"}
        )

        assert [d["dataset_name"] for d in by_sample.json()] == ["cold"]
        assert wrong_unit.json() == []

    def test_conditions_combine_with_other_fields(self, client, alice_headers):
        self.seed(client, alice_headers)

        response = client.get(
            "/datasets/fullfacet",
            params={
                "fields": json.dumps({
                    "type": "raw",
                    "scientific": [{"lhs": "temperature", "relation": "GREATER_THAN", "rhs": 1}],
                }),
                "facets": '["type"]',
            },
            headers=alice_headers,
        )

        assert response.json()[0]["all"] == [{"totalSets": 2}]

    def test_malformed_conditions_are_bad_requests(self, client, alice_headers):
        for scientific in (
            {"lhs": "temperature"},
            [{"lhs": "temperature", "relation": "ABOUT", "rhs": 1}],
            [{"lhs": "temperature", "relation": "LESS_THAN", "rhs": [1]}],
            [{"lhs": "temperature", "relation": "LESS_THAN", "rhs": "cold"}],
            [{"lhs": "a\"b", "relation": "EQUAL_TO", "rhs": 1}],
        ):
            response = client.get(
                "/datasets/fullquery",
                params={"fields": json.dumps({"scientific": scientific})},
                headers=alice_headers,
            )
            assert response.status_code == 400, scientific
