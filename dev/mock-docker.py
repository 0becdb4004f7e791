#!/usr/bin/env python3
"""Mock Docker Engine API server for local development."""

import sys

from flask import Flask, jsonify

app = Flask(__name__)

SERVICE_LABEL = "com.docker.swarm.service.id"

CONTAINERS = [
    {"Id": "0123456789ab", "Names": ["/bob-app"], "Image": "nginx:alpine", "State": "running", "Labels": {}},
    {
        "Id": "fedcba987654",
        "Names": ["/web.1.x8k2"],
        "Image": "nginx:alpine",
        "State": "running",
        "Labels": {SERVICE_LABEL: "web-service-id"},
    },
    {"Id": "aaaabbbbcccc", "Names": ["/shared-redis"], "Image": "redis:7", "State": "running", "Labels": {}},
]


def _inspect_payload(container):
    return {
        "Id": container["Id"],
        "Name": container["Names"][0],
        "State": {"Status": container["State"], "Running": True},
        "Config": {"Image": container["Image"], "Labels": dict(container["Labels"])},
    }


@app.route("/containers/json", methods=["GET"])
@app.route("/<version>/containers/json", methods=["GET"])
def container_list(version=None):
    """Return the static container list."""
    return jsonify(CONTAINERS)


@app.route("/containers/<container_id>/json", methods=["GET"])
@app.route("/<version>/containers/<container_id>/json", methods=["GET"])
def container_inspect(container_id, version=None):
    """Return an inspect payload (prefix match like the real engine)."""
    for c in CONTAINERS:
        if c["Id"].startswith(container_id) or container_id in [n.lstrip("/") for n in c["Names"]]:
            return jsonify(_inspect_payload(c))
    return jsonify({"message": f"No such container: {container_id}"}), 404


@app.route("/_ping")
@app.route("/<version>/_ping")
def ping(version=None):
    """Health check endpoint."""
    return "OK"


if __name__ == "__main__":
    print("Mock Docker API starting on http://0.0.0.0:2375", file=sys.stderr)
    app.run(host="0.0.0.0", port=2375, debug=False)
