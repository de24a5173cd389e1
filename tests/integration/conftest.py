"""Fixtures for integration tests against a real Synapse homeserver."""

import os
import time
from pathlib import Path
from typing import Generator

import pytest

SYNAPSE_IMAGE = "matrixdotorg/synapse:latest"


def pytest_collection_modifyitems(config, items):
    if os.environ.get("MATRIX_MIRROR_INTEGRATION"):
        return
    skip = pytest.mark.skip(reason="set MATRIX_MIRROR_INTEGRATION=1 to run integration tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def synapse_container(tmp_path_factory) -> Generator[dict, None, None]:
    """Start Synapse container for integration tests."""
    import docker

    client = docker.from_env()
    data_dir: Path = tmp_path_factory.mktemp("synapse-data")

    # Generate initial configuration
    client.containers.run(
        SYNAPSE_IMAGE,
        "generate",
        remove=True,
        environment={
            "SYNAPSE_SERVER_NAME": "test.local",
            "SYNAPSE_REPORT_STATS": "no",
        },
        volumes={str(data_dir.absolute()): {"bind": "/data", "mode": "rw"}},
    )
    with open(data_dir / "homeserver.yaml", "a") as f:
        f.write("\nenable_registration: true\nenable_registration_without_verification: true\n")
        # Tests create rooms and send messages quickly
        f.write("rc_message:\n  per_second: 1000\n  burst_count: 1000\n")

    container = client.containers.run(
        SYNAPSE_IMAGE,
        detach=True,
        remove=True,
        volumes={str(data_dir.absolute()): {"bind": "/data", "mode": "rw"}},
        ports={"8008/tcp": 8008},
    )

    try:
        # Wait for Synapse to be ready
        for _ in range(30):
            if b"Synapse now listening on TCP port 8008" in container.logs():
                break
            time.sleep(4)
        else:
            raise TimeoutError("Synapse failed to start within the expected time")

        for user in ("admin", "guest"):
            container.exec_run(
                [
                    "register_new_matrix_user",
                    "-c",
                    "/data/homeserver.yaml",
                    "--admin" if user == "admin" else "--no-admin",
                    "-u",
                    user,
                    "-p",
                    f"{user}_password",
                    "http://localhost:8008",
                ]
            )

        yield {
            "homeserver": "http://localhost:8008",
            "user": "@admin:test.local",
            "password": "admin_password",
            "other_user": "@guest:test.local",
            "other_password": "guest_password",
        }
    finally:
        container.stop()
