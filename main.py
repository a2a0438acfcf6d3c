import argparse
import logging
import sys
from enum import Enum

import requests
from dotenv import load_dotenv
from gql import gql
from gql.transport.exceptions import TransportError

from client import DDSClientError, ArgumentError, get_client, load_config
from queries import (
    LIST_APPS_QUERY,
    APP_EXISTS_QUERY,
    ADD_APP_MUTATION,
    DELETE_APP_MUTATION,
    LIST_SERVICES_QUERY,
    ADD_SERVICE_MUTATION,
    DELETE_SERVICE_MUTATION,
    LINK_SERVICE_MUTATION,
    UNLINK_SERVICE_MUTATION,
)

__version__ = "0.1.0"

logger = logging.getLogger("dds_client")

ERROR_PREFIX = " !    "

APP_NOT_FOUND_HINTS = [
    "- You may not have been granted access to this app.",
    "- The app may not exist (or may not have been deployed yet).",
    "- The app is broken and could not be started.",
]

SERVICE_NOT_FOUND_HINTS = [
    "- You may not have been granted access to this service.",
    "- The service may not exist.",
]


class ServiceType(str, Enum):
    REDIS = "redis"
    POSTGRES = "postgres"


def require(value, what):
    if not value:
        raise ArgumentError(f"No {what} specified")
    return value


class Manager:
    """Runs Manager API commands against a gql client and prints their outcome.

    Every command returns the process exit code.
    """

    def __init__(self, client):
        self.client = client

    def _execute(self, document, variables=None):
        request = gql(document)
        logger.debug("Sending %s %s", request.definitions[0].name.value, variables)
        return self.client.execute(request, variable_values=variables or {})

    def _report(self, result, field, subject, verb):
        """Print the server's error if there is one, otherwise a confirmation."""
        payload = result.get(field)
        if payload is None:
            print(f"{ERROR_PREFIX}Empty {field} response from server")
            return 1
        error = payload.get("error")
        if error:
            print(f"{ERROR_PREFIX}{error}")
            return 1
        print(f"====> {subject} {verb}!")
        return 0

    def _not_found(self, name, hints):
        print(f"{name} not found. Possible causes:")
        for hint in hints:
            print(hint)
        return 1

    # Apps

    def fetch_app_names(self):
        """Collect every app name across all pages of the listing."""
        names = []
        page = 1
        requested = set()
        # Stops on a repeated page too, including nextPage == page
        while page != 0 and page not in requested:
            requested.add(page)
            result = self._execute(LIST_APPS_QUERY, {"page": page, "allApps": True})
            wrapper = result.get("apps") or {}
            names.extend(app["name"] for app in wrapper.get("apps") or [])
            page = wrapper.get("nextPage") or 0
        return sorted(names)

    def apps_list(self):
        for name in self.fetch_app_names():
            print(name)
        return 0

    def apps_create(self, name):
        require(name, "name")
        result = self._execute(ADD_APP_MUTATION, {"name": name})
        app = (result.get("addApp") or {}).get("app") or {}
        return self._report(result, "addApp", app.get("name") or name, "created")

    def apps_delete(self, name):
        require(name, "name")
        result = self._execute(DELETE_APP_MUTATION, {"name": name})
        return self._report(result, "deleteApp", name, "deleted")

    def apps_exists(self, name):
        require(name, "name")
        result = self._execute(APP_EXISTS_QUERY, {"name": name, "allApps": False})
        for app in (result.get("apps") or {}).get("apps") or []:
            if app["name"] == name:
                print(f"{name} exists")
                return 0
        return self._not_found(name, APP_NOT_FOUND_HINTS)

    # Services

    def fetch_services(self, service_type):
        """Return the services of the given type, in server order."""
        result = self._execute(LIST_SERVICES_QUERY)
        return [
            service for service in result.get("services") or []
            if service["serviceType"] == ServiceType(service_type).value
        ]

    def service_create(self, service_type, name):
        require(name, "name")
        result = self._execute(
            ADD_SERVICE_MUTATION,
            {"name": name, "serviceType": ServiceType(service_type).value},
        )
        return self._report(result, "addService", name, "created")

    def service_delete(self, service_type, name):
        require(name, "name")
        result = self._execute(
            DELETE_SERVICE_MUTATION,
            {"name": name, "serviceType": ServiceType(service_type).value},
        )
        return self._report(result, "deleteService", name, "deleted")

    def service_exists(self, service_type, name):
        require(name, "name")
        for service in self.fetch_services(service_type):
            if service["name"] == name:
                print(f"{name} exists")
                return 0
        return self._not_found(name, SERVICE_NOT_FOUND_HINTS)

    def service_list(self, service_type):
        for service in self.fetch_services(service_type):
            print(service["name"])
        return 0

    def service_link(self, service_type, name, app):
        require(name, "name")
        require(app, "app")
        result = self._execute(
            LINK_SERVICE_MUTATION,
            {"appname": app, "serviceName": name, "serviceType": ServiceType(service_type).value},
        )
        return self._report(result, "linkService", app, "linked")

    def service_unlink(self, service_type, name, app):
        require(name, "name")
        require(app, "app")
        result = self._execute(
            UNLINK_SERVICE_MUTATION,
            {"appname": app, "serviceName": name, "serviceType": ServiceType(service_type).value},
        )
        return self._report(result, "unlinkService", app, "unlinked")


def _add_name(parser, what):
    parser.add_argument("--name", default="", help=f"Name of {what}")


def _add_app(parser):
    parser.add_argument("--app", default="", help="Name of app")


def add_service_commands(subparsers, service_type):
    prefix = service_type.value

    create = subparsers.add_parser(f"{prefix}:create", help=f"Create a {prefix} service")
    _add_name(create, "service")
    create.set_defaults(func=lambda m, a, t=service_type: m.service_create(t, a.name))

    delete = subparsers.add_parser(f"{prefix}:delete", help=f"Delete a {prefix} service")
    _add_name(delete, "service")
    delete.set_defaults(func=lambda m, a, t=service_type: m.service_delete(t, a.name))

    exists = subparsers.add_parser(f"{prefix}:exists", help=f"Check if a {prefix} service exists")
    _add_name(exists, "service")
    exists.set_defaults(func=lambda m, a, t=service_type: m.service_exists(t, a.name))

    link = subparsers.add_parser(f"{prefix}:link", help=f"Link a {prefix} service to an app")
    _add_name(link, "service")
    _add_app(link)
    link.set_defaults(func=lambda m, a, t=service_type: m.service_link(t, a.name, a.app))

    listing = subparsers.add_parser(f"{prefix}:list", help=f"List all {prefix} services")
    listing.set_defaults(func=lambda m, a, t=service_type: m.service_list(t))

    unlink = subparsers.add_parser(f"{prefix}:unlink", help=f"Unlink a {prefix} service from an app")
    _add_name(unlink, "service")
    _add_app(unlink)
    unlink.set_defaults(func=lambda m, a, t=service_type: m.service_unlink(t, a.name, a.app))


def create_parser():
    parser = argparse.ArgumentParser(
        prog="dds-client",
        description="A simple client for the Dash Enterprise Manager API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    parser.add_argument("--debug", action="store_true", help="Log requests and responses")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    apps_list = subparsers.add_parser("apps:list", help="List all apps")
    apps_list.set_defaults(func=lambda m, a: m.apps_list())

    apps_create = subparsers.add_parser("apps:create", help="Create an app")
    _add_name(apps_create, "app")
    apps_create.set_defaults(func=lambda m, a: m.apps_create(a.name))

    apps_delete = subparsers.add_parser("apps:delete", help="Delete an app")
    _add_name(apps_delete, "app")
    apps_delete.set_defaults(func=lambda m, a: m.apps_delete(a.name))

    apps_exists = subparsers.add_parser("apps:exists", help="Check if an app exists")
    _add_name(apps_exists, "app")
    apps_exists.set_defaults(func=lambda m, a: m.apps_exists(a.name))

    for service_type in ServiceType:
        add_service_commands(subparsers, service_type)

    return parser


def main(argv=None):
    """Parse the command line, run one command and return its exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    load_dotenv()

    try:
        config = load_config(insecure=args.insecure)
        if not config.verify_tls:
            logger.warning("TLS certificate verification is disabled for %s", config.url)
        manager = Manager(get_client(config))
        return args.func(manager, args)
    except DDSClientError as e:
        print(f"Error: {e}", file=sys.stderr)
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
    except requests.exceptions.RequestException as e:
        print(f"Error: could not reach Dash Enterprise: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
