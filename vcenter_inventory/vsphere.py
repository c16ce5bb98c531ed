import logging
import ssl

from pyVim import connect
from pyVmomi import vim, vmodl

from vcenter_inventory.errors import EnumerationFault
from vcenter_inventory.models import Connection
from vcenter_inventory.schemas import datastore_schema, host_schema, vm_schema

logger = logging.getLogger(__name__)

ENTITY_TYPES = {
    "vm": vim.VirtualMachine,
    "host": vim.HostSystem,
    "datastore": vim.Datastore,
}


def _get_localizable_message(fault_messages):
    """Extracts message from LocalizableMessage array if possible."""
    if isinstance(fault_messages, list) and fault_messages:
        return fault_messages[0].message
    return str(fault_messages)


def _fault_text(e):
    if getattr(e, "faultMessage", None):
        return _get_localizable_message(e.faultMessage)
    return getattr(e, "msg", None) or str(e)


def ssl_context(disable_ssl):
    if not disable_ssl:
        return None
    ssl_ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ssl_ctx.check_hostname = False
    ssl_ctx.verify_mode = ssl.CERT_NONE
    return ssl_ctx


def list_managed_objects(si, obj_type, page_size=None):
    """List every managed object of ``obj_type`` with a paged PropertyCollector traversal."""
    content = si.RetrieveContent()
    view = content.viewManager.CreateContainerView(content.rootFolder, [obj_type], True)
    try:
        obj_spec = vmodl.query.PropertyCollector.ObjectSpec(
            obj=view, skip=True,
            selectSet=[
                vmodl.query.PropertyCollector.TraversalSpec(
                    name="traverseView", path="view", skip=False, type=view.__class__
                )
            ]
        )
        prop_spec = vmodl.query.PropertyCollector.PropertySpec(type=obj_type, all=False, pathSet=["name"])
        filter_spec = vmodl.query.PropertyCollector.FilterSpec(objectSet=[obj_spec], propSet=[prop_spec])
        options = vmodl.query.PropertyCollector.RetrieveOptions(maxObjects=page_size)

        results = []
        props = content.propertyCollector.RetrievePropertiesEx(specSet=[filter_spec], options=options)
        while props:
            results.extend(o.obj for o in props.objects)
            token = getattr(props, "token", None)
            if not token:
                break
            logger.debug(f"Fetched {len(results)} {obj_type.__name__} objects so far, continuing")
            props = content.propertyCollector.ContinueRetrievePropertiesEx(token=token)
        return results
    finally:
        logger.debug(f"Destroying ContainerView for {obj_type.__name__}")
        view.Destroy()


class VSphereSource:
    """pyVmomi-backed inventory source for a single vCenter or ESXi endpoint."""

    def __init__(self, config, credentials):
        self.config = config
        self.credentials = credentials
        self.si = None

    @property
    def content(self):
        return self.si.RetrieveContent()

    def connect(self):
        self.si = connect.SmartConnect(
            host=self.config.endpoint,
            user=self.credentials.user,
            pwd=self.credentials.password,
            port=self.config.port,
            sslContext=ssl_context(self.config.disable_ssl),
        )
        logger.info(f"Connected to vCenter: {self.config.endpoint}")
        return self.si

    def describe(self):
        content = self.content
        about = content.about
        session = content.sessionManager.currentSession
        return Connection(
            endpoint=self.config.endpoint,
            server_version=about.version,
            server_build=about.build,
            user=session.userName if session else self.credentials.user,
        )

    def list_entities(self, kind):
        try:
            return list_managed_objects(self.si, ENTITY_TYPES[kind], page_size=self.config.batch_size)
        except vmodl.query.InvalidProperty as e:
            raise EnumerationFault(kind, f"invalid property path '{e.name}': {_fault_text(e)}") from e
        except Exception as e:
            raise EnumerationFault(kind, _fault_text(e)) from e

    def license_key(self, host):
        manager = self.content.licenseManager.licenseAssignmentManager
        assigned = manager.QueryAssignedLicenses(entityId=host._moId)
        return assigned[0].assignedLicense.licenseKey

    def schema(self, kind):
        if kind == "vm":
            return vm_schema()
        if kind == "host":
            return host_schema(self.license_key)
        if kind == "datastore":
            return datastore_schema()
        raise KeyError(kind)

    def disconnect(self):
        if self.si is None:
            return
        si, self.si = self.si, None
        connect.Disconnect(si)
        logger.info(f"Disconnected from vCenter: {self.config.endpoint}")
