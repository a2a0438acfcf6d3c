LIST_APPS_QUERY = """
query Apps($page: Int!, $allApps: Boolean!) {
  apps(page: $page, allApps: $allApps) {
    apps {
      name
    }
    nextPage
  }
}
"""

APP_EXISTS_QUERY = """
query AppExists($name: String!, $allApps: Boolean!) {
  apps(name: $name, allApps: $allApps) {
    apps {
      name
    }
  }
}
"""

ADD_APP_MUTATION = """
mutation AddApp($name: String!) {
  addApp(name: $name) {
    app {
      name
    }
    error
  }
}
"""

DELETE_APP_MUTATION = """
mutation DeleteApp($name: String!) {
  deleteApp(name: $name) {
    ok
    error
  }
}
"""

LIST_SERVICES_QUERY = """
query Services {
  services {
    name
    serviceType
    created
  }
}
"""

ADD_SERVICE_MUTATION = """
mutation AddService($name: String!, $serviceType: ServiceType!) {
  addService(name: $name, serviceType: $serviceType) {
    service {
      name
      serviceType
      created
    }
    error
  }
}
"""

DELETE_SERVICE_MUTATION = """
mutation DeleteService($name: String!, $serviceType: ServiceType!) {
  deleteService(name: $name, serviceType: $serviceType) {
    ok
    error
  }
}
"""

LINK_SERVICE_MUTATION = """
mutation LinkService($appname: String!, $serviceName: String!, $serviceType: ServiceType!) {
  linkService(appname: $appname, serviceType: $serviceType, serviceName: $serviceName) {
    ok
    error
  }
}
"""

UNLINK_SERVICE_MUTATION = """
mutation UnlinkService($appname: String!, $serviceName: String!, $serviceType: ServiceType!) {
  unlinkService(appname: $appname, serviceType: $serviceType, serviceName: $serviceName) {
    ok
    error
  }
}
"""
