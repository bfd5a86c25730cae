"""Shared fixtures: sample rendered charts and an in-memory Vault."""

import pytest

from kubevault.core.corpus import Corpus
from kubevault.core.errors import VaultNotFoundError

# A rendered chart touching every reference mechanism
CHART = """\
---
# Source: api/templates/deployment.yaml
apiVersion: apps/v1
kind: Deployment
metadata:
  name: api
spec:
  template:
    spec:
      volumes:
        - name: creds
          secret:
            secretName: db-creds
        - name: config
          configMap:
            name: api-config
      containers:
        - name: api
          image: api:1.0
          args:
            - --password-file=/var/secrets/db/password
            - --secrets-dir=/var/secrets/db
          env:
            - name: DB_USER
              valueFrom:
                secretKeyRef:
                  name: db
                  key: user
            - name: DB_PASSWORD
              valueFrom:
                secretKeyRef:
                  name: db
                  key: password
            - name: DB_PASSWORD_FILE
              value: /var/secrets/db/password
          envFrom:
            - secretRef:
                name: api-env
          volumeMounts:
            - name: creds
              mountPath: /var/secrets/db
            - name: config
              mountPath: /etc/api
        - name: sidecar
          image: sidecar:1.0
        - image: busybox:1.36
          command: ["cat", "/etc/creds/token"]
          volumeMounts:
            - name: creds
              mountPath: /etc/creds
---
# Source: api/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: api
spec:
  ports:
    - port: 80
"""


class FakeVaultClient:
    """Serves fetch_all / list_children from dictionaries and counts calls."""

    vault_addr = "https://vault.example.com:8200"

    def __init__(self, secrets=None, folders=None):
        self.secrets = secrets or {}
        self.folders = folders or {}
        self.fetch_calls = []

    def fetch_all(self, engine, path):
        self.fetch_calls.append((engine, path))
        try:
            return dict(self.secrets[(engine, path.lstrip("/"))])
        except KeyError:
            raise VaultNotFoundError(f"{engine}/data/{path.lstrip('/')}")

    def list_children(self, engine, path):
        try:
            return list(self.folders[(engine, path.lstrip("/"))])
        except KeyError:
            raise VaultNotFoundError(f"{engine}/metadata/{path.lstrip('/')}")


@pytest.fixture
def chart_text():
    return CHART


@pytest.fixture
def chart(chart_text):
    return Corpus.from_text(chart_text)


@pytest.fixture
def vault():
    return FakeVaultClient(
        secrets={
            ("secret", "apps/db"): {"user": "api", "password": "s3cret"},
            ("secret", "apps/api-env"): {"API_KEY": "abc123"},
            ("secret", "apps/db-creds"): {"token": "t0k3n"},
        },
        folders={
            ("secret", "apps/"): ["db", "api-env", "db-creds", "unused", "legacy/"],
        },
    )
