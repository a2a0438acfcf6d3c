"""Shared fixtures: an in-memory Manager API standing in for gql.Client."""

import pytest

import main
from main import Manager


class FakeManagerServer:
    """Answers the Manager API documents from in-memory state.

    ``pages`` maps a page number to ``(names, next_page)`` and, when set,
    replaces the plain ``apps`` listing. ``responses`` maps an operation name
    to a canned result returned verbatim.
    """

    def __init__(self):
        self.apps = []
        self.services = []
        self.links = set()
        self.pages = None
        self.responses = {}
        self.calls = []

    def execute(self, document, variable_values=None):
        operation = document.definitions[0].name.value
        variables = dict(variable_values or {})
        self.calls.append((operation, variables))
        if operation in self.responses:
            return self.responses[operation]
        handlers = {
            "Apps": self.list_apps,
            "AppExists": self.find_apps,
            "AddApp": self.add_app,
            "DeleteApp": self.delete_app,
            "Services": self.list_services,
            "AddService": self.add_service,
            "DeleteService": self.delete_service,
            "LinkService": self.link_service,
            "UnlinkService": self.unlink_service,
        }
        return handlers[operation](variables)

    @property
    def operations(self):
        return [operation for operation, _ in self.calls]

    def list_apps(self, variables):
        if self.pages is None:
            names, next_page = self.apps, 0
        else:
            names, next_page = self.pages[variables["page"]]
        return {"apps": {"apps": [{"name": n} for n in names], "nextPage": next_page}}

    def find_apps(self, variables):
        matches = [n for n in self.apps if n == variables["name"]]
        return {"apps": {"apps": [{"name": n} for n in matches]}}

    def add_app(self, variables):
        name = variables["name"]
        if name in self.apps:
            return {"addApp": {"app": {"name": ""}, "error": f"{name} is already taken"}}
        self.apps.append(name)
        return {"addApp": {"app": {"name": name}, "error": ""}}

    def delete_app(self, variables):
        name = variables["name"]
        if name not in self.apps:
            return {"deleteApp": {"ok": False, "error": f"{name} does not exist"}}
        self.apps.remove(name)
        return {"deleteApp": {"ok": True, "error": ""}}

    def _find_service(self, name, service_type):
        for service in self.services:
            if service["name"] == name and service["serviceType"] == service_type:
                return service
        return None

    def list_services(self, variables):
        return {"services": list(self.services)}

    def add_service(self, variables):
        name, service_type = variables["name"], variables["serviceType"]
        if self._find_service(name, service_type):
            return {"addService": {"service": None, "error": f"{name} is already taken"}}
        service = {"name": name, "serviceType": service_type, "created": "2026-10-19T12:00:00"}
        self.services.append(service)
        return {"addService": {"service": service, "error": ""}}

    def delete_service(self, variables):
        service = self._find_service(variables["name"], variables["serviceType"])
        if service is None:
            return {"deleteService": {"ok": False, "error": "Service not found"}}
        self.services.remove(service)
        return {"deleteService": {"ok": True, "error": ""}}

    def _link_key(self, variables):
        return (variables["appname"], variables["serviceName"], variables["serviceType"])

    def link_service(self, variables):
        if variables["appname"] not in self.apps:
            return {"linkService": {"ok": False, "error": "App not found"}}
        if self._find_service(variables["serviceName"], variables["serviceType"]) is None:
            return {"linkService": {"ok": False, "error": "Service not found"}}
        self.links.add(self._link_key(variables))
        return {"linkService": {"ok": True, "error": ""}}

    def unlink_service(self, variables):
        key = self._link_key(variables)
        if key not in self.links:
            return {"unlinkService": {"ok": False, "error": "Service is not linked to this app"}}
        self.links.remove(key)
        return {"unlinkService": {"ok": True, "error": ""}}


@pytest.fixture
def server():
    return FakeManagerServer()


@pytest.fixture
def manager(server):
    return Manager(server)


@pytest.fixture
def dash_env(monkeypatch):
    monkeypatch.setenv("DASH_ENTERPRISE_URL", "https://dash.example.com")
    monkeypatch.setenv("DASH_ENTERPRISE_USERNAME", "alice")
    monkeypatch.setenv("DASH_ENTERPRISE_API_KEY", "s3cret")
    monkeypatch.delenv("DASH_ENTERPRISE_INSECURE", raising=False)
    monkeypatch.delenv("DASH_ENTERPRISE_TIMEOUT", raising=False)


@pytest.fixture
def run_cli(monkeypatch, server):
    """Run main() against the fake server, recording the Config it was given."""
    configs = []

    def fake_get_client(config):
        configs.append(config)
        return server

    monkeypatch.setattr(main, "load_dotenv", lambda: None)
    monkeypatch.setattr(main, "get_client", fake_get_client)

    def run(*argv):
        return main.main(list(argv))

    run.configs = configs
    return run
