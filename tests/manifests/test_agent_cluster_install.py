import textwrap

import pytest
import yaml

from agentinstall.assets.store import DirectoryFileFetcher, File, write_files
from agentinstall.config.defaults import InstallConfigDefaults
from agentinstall.config.models import (
    BareMetalPlatform,
    ClusterNetworkEntry,
    InstallConfig,
    MachinePool,
    Networking,
    ObjectMeta,
    Platform,
)
from agentinstall.manifests.agent_cluster_install import (
    AGENT_CLUSTER_INSTALL_FILENAME,
    AgentClusterInstallAsset,
    build_agent_cluster_install,
)
from agentinstall.manifests.errors import (
    ManifestError,
    ManifestGenerationError,
    ManifestLoadError,
    ManifestValidationError,
)
from agentinstall.manifests.models import AgentClusterInstall
from agentinstall.observers.dispatcher import EventBus
from agentinstall.observers.events import ManifestGenerated, ManifestInvalid, ManifestLoaded
from agentinstall.observers.interface import Observer


class Capture(Observer):
    def __init__(self): self.events = []
    def notify(self, event): self.events.append(event)


class MemoryFetcher:
    def __init__(self, files=None):
        self.files = files or {}

    def fetch_by_name(self, name):
        if name not in self.files:
            raise FileNotFoundError(name)
        return File(filename=name, data=self.files[name])


class BrokenFetcher:
    def fetch_by_name(self, name):
        raise PermissionError(f"permission denied: {name}")


def _install_config(
    control_plane=1,
    compute=(3, 3),
    cluster=(("10.128.0.0/14", 23),),
    service=("172.30.0.0/16",),
    network_type="",
    vips=("192.168.1.10", "192.168.1.11"),
    ssh_key="ssh-ed25519 AAAAC3Nza user@host",
):
    return InstallConfig(
        metadata=ObjectMeta(name="ostest"),
        base_domain="example.com",
        control_plane=MachinePool(name="master", replicas=control_plane),
        compute=[MachinePool(name=f"worker-{i}", replicas=r) for i, r in enumerate(compute)],
        networking=Networking(
            network_type=network_type,
            cluster_network=[ClusterNetworkEntry(cidr=c, host_prefix=p) for c, p in cluster],
            service_network=list(service),
        ),
        platform=Platform(baremetal=BareMetalPlatform(api_vip=vips[0], ingress_vip=vips[1])),
        ssh_key=ssh_key,
    )


# ----------------------------------------------------------------------
# build
# ----------------------------------------------------------------------

def test_single_node_build():
    aci = build_agent_cluster_install(_install_config(control_plane=1))

    assert aci.metadata.name == "ostest"
    assert aci.metadata.namespace == "cluster0"
    assert aci.spec.image_set_ref.name == "openshift-4.11"
    assert aci.spec.cluster_deployment_ref.name == "ostest"
    assert aci.spec.provision_requirements.worker_agents == 6
    assert aci.spec.provision_requirements.control_plane_agents == 1
    assert aci.spec.networking.network_type == "OVNKubernetes"
    assert [(c.cidr, c.host_prefix) for c in aci.spec.networking.cluster_network] == [("10.128.0.0/14", 23)]
    assert aci.spec.networking.service_network == ["172.30.0.0/16"]
    assert aci.spec.api_vip is None
    assert aci.spec.ingress_vip is None


def test_multi_node_build_sets_vips():
    aci = build_agent_cluster_install(_install_config(control_plane=3))
    assert aci.spec.provision_requirements.control_plane_agents == 3
    assert aci.spec.api_vip == "192.168.1.10"
    assert aci.spec.ingress_vip == "192.168.1.11"


@pytest.mark.parametrize("vips", [("192.168.1.10", ""), ("", "192.168.1.11"), ("", "")])
def test_half_specified_vip_pair_is_dropped_silently(vips):
    aci = build_agent_cluster_install(_install_config(control_plane=3, vips=vips))
    assert aci.spec.api_vip is None
    assert aci.spec.ingress_vip is None


def test_platform_without_vips():
    ic = _install_config(control_plane=3)
    ic.platform = Platform()
    aci = build_agent_cluster_install(ic)
    assert aci.spec.api_vip is None


def test_install_config_network_type_and_namespace_are_used():
    ic = _install_config(network_type="OpenShiftSDN")
    ic.metadata.namespace = "agents"
    aci = build_agent_cluster_install(ic, release_version="4.12")
    assert aci.spec.networking.network_type == "OpenShiftSDN"
    assert aci.metadata.namespace == "agents"
    assert aci.spec.image_set_ref.name == "openshift-4.12"


def test_injected_defaults_provider():
    aci = build_agent_cluster_install(
        _install_config(), defaults=InstallConfigDefaults(network_type="Calico")
    )
    assert aci.spec.networking.network_type == "Calico"


def test_build_does_not_touch_install_config():
    ic = _install_config()
    before = ic.model_dump()
    build_agent_cluster_install(ic)
    assert ic.model_dump() == before


def test_ssh_key_trims_only_pipes_newlines_and_tabs():
    aci = build_agent_cluster_install(_install_config(ssh_key="|\n\tssh-rsa AAAA key \n|\t"))
    assert aci.spec.ssh_public_key == "ssh-rsa AAAA key "

    aci = build_agent_cluster_install(_install_config(ssh_key="  ssh-rsa AAAA\r"))
    assert aci.spec.ssh_public_key == "  ssh-rsa AAAA\r"


def test_cluster_network_with_host_bits_fails_build():
    with pytest.raises(ManifestGenerationError, match="failed to validate ClusterNetwork CIDR"):
        build_agent_cluster_install(_install_config(cluster=(("10.128.0.5/14", 23),)))


def test_unparsable_cluster_network_fails_build():
    ic = _install_config()
    # bypass install-config validation to simulate upstream drift
    ic.networking.cluster_network = [ClusterNetworkEntry.model_construct(cidr="10.128.0.0", host_prefix=23)]
    with pytest.raises(ManifestGenerationError, match="failed to parse ClusterNetwork CIDR"):
        build_agent_cluster_install(ic)


def test_unparsable_service_network_fails_build():
    ic = _install_config()
    ic.networking.service_network = ["172.30.0.0/16", "nope"]
    with pytest.raises(ManifestGenerationError, match="failed to parse ServiceNetwork CIDR"):
        build_agent_cluster_install(ic)


def test_service_network_is_normalized():
    aci = build_agent_cluster_install(
        _install_config(cluster=(("fd01::/48", 64),), service=("fd02:0:0:0::/112",))
    )
    assert aci.spec.networking.cluster_network[0].cidr == "fd01::/48"
    assert aci.spec.networking.service_network == ["fd02::/112"]


def test_missing_replicas_is_a_programming_error():
    ic = _install_config()
    ic.control_plane.replicas = None
    with pytest.raises(ValueError, match="controlPlane replicas"):
        build_agent_cluster_install(ic)


# ----------------------------------------------------------------------
# asset generate / finish
# ----------------------------------------------------------------------

def test_generate_produces_file_and_event():
    cap = Capture()
    asset = AgentClusterInstallAsset(bus=EventBus([cap]))
    asset.generate(_install_config(control_plane=3))

    [f] = asset.files()
    assert f.filename == "cluster-manifests/agent-cluster-install.yaml"
    doc = yaml.safe_load(f.data)
    assert doc["apiVersion"] == "extensions.hive.openshift.io/v1beta1"
    assert doc["kind"] == "AgentClusterInstall"
    assert doc["spec"]["networking"]["clusterNetwork"] == [{"cidr": "10.128.0.0/14", "hostPrefix": 23}]
    assert doc["spec"]["provisionRequirements"] == {"controlPlaneAgents": 3, "workerAgents": 6}
    assert doc["spec"]["apiVIP"] == "192.168.1.10"
    assert doc["spec"]["imageSetRef"] == {"name": "openshift-4.11"}

    ev = next(e for e in cap.events if isinstance(e, ManifestGenerated))
    assert ev.network_type == "OVNKubernetes"


def test_single_node_file_omits_vips():
    asset = AgentClusterInstallAsset()
    asset.generate(_install_config(control_plane=1))
    spec = yaml.safe_load(asset.files()[0].data)["spec"]
    assert "apiVIP" not in spec
    assert "ingressVIP" not in spec


def test_generate_without_install_config_is_an_error():
    asset = AgentClusterInstallAsset()
    with pytest.raises(ManifestError, match="missing configuration or manifest file"):
        asset.generate(None)
    assert asset.files() == []


def test_generate_rejects_ipv6_with_sdn():
    cap = Capture()
    asset = AgentClusterInstallAsset(bus=EventBus([cap]))
    ic = _install_config(network_type="OpenShiftSDN", cluster=(("fd01::/48", 64),))
    with pytest.raises(ManifestValidationError, match="invalid NetworkType configured") as exc:
        asset.generate(ic)
    assert [e.field for e in exc.value.errors] == ["spec.networking.networkType"]
    assert any(isinstance(e, ManifestInvalid) for e in cap.events)


def test_generate_adopts_nothing_on_validation_failure():
    asset = AgentClusterInstallAsset()
    asset.generate(_install_config(control_plane=3))
    [good] = asset.files()
    good_config = asset.config

    with pytest.raises(ManifestValidationError):
        asset.generate(_install_config(network_type="OpenShiftSDN", service=("fd02::/112",)))

    assert asset.files() == [good]
    assert asset.config is good_config
    assert asset.config.spec.networking.network_type == "OVNKubernetes"


def test_generate_rejected_first_time_leaves_asset_empty():
    asset = AgentClusterInstallAsset()
    with pytest.raises(ManifestValidationError):
        asset.generate(_install_config(network_type="OpenShiftSDN", cluster=(("fd01::/48", 64),)))
    assert asset.config is None
    assert asset.files() == []


# ----------------------------------------------------------------------
# load
# ----------------------------------------------------------------------

def test_load_missing_file_is_not_an_error():
    cap = Capture()
    asset = AgentClusterInstallAsset(bus=EventBus([cap]))
    assert asset.load(MemoryFetcher()) is False
    assert asset.config is None
    assert asset.files() == []
    ev = next(e for e in cap.events if isinstance(e, ManifestLoaded))
    assert ev.found is False


def test_load_missing_file_from_directory(tmp_path):
    assert AgentClusterInstallAsset().load(DirectoryFileFetcher(tmp_path)) is False


def test_load_read_failure_is_reported():
    with pytest.raises(ManifestLoadError, match="failed to load cluster-manifests/agent-cluster-install.yaml file"):
        AgentClusterInstallAsset().load(BrokenFetcher())


def test_round_trip_through_disk(tmp_path):
    built = AgentClusterInstallAsset()
    built.generate(_install_config(control_plane=3, ssh_key="|\nssh-ed25519 AAAA user\n"))
    write_files(tmp_path, built.files())
    assert (tmp_path / AGENT_CLUSTER_INSTALL_FILENAME).is_file()

    loaded = AgentClusterInstallAsset()
    assert loaded.load(DirectoryFileFetcher(tmp_path)) is True
    assert loaded.config.spec.networking.model_dump() == built.config.spec.networking.model_dump()
    assert (
        loaded.config.spec.provision_requirements.model_dump()
        == built.config.spec.provision_requirements.model_dump()
    )
    assert loaded.config.spec.ssh_public_key == "ssh-ed25519 AAAA user"
    assert loaded.config.spec.ssh_public_key.strip("|\n\t") == loaded.config.spec.ssh_public_key
    assert loaded.config.to_dict() == built.config.to_dict()
    assert loaded.files()[0].data == built.files()[0].data


MANIFEST = textwrap.dedent("""
    apiVersion: extensions.hive.openshift.io/v1beta1
    kind: AgentClusterInstall
    metadata:
      creationTimestamp: null
      name: ostest
      namespace: cluster0
    spec:
      clusterDeploymentRef:
        name: ostest
      imageSetRef:
        name: openshift-4.11
      networking:
        clusterNetwork:
        - cidr: 10.128.0.0/14
          hostPrefix: 23
        serviceNetwork:
        - 172.30.0.0/16
      provisionRequirements:
        controlPlaneAgents: 1
        workerAgents: 0
      sshPublicKey: ssh-rsa AAAA
    status: {}
""")


def _fetcher(text):
    return MemoryFetcher({AGENT_CLUSTER_INSTALL_FILENAME: text.encode()})


def test_load_defaults_missing_network_type(caplog):
    asset = AgentClusterInstallAsset()
    with caplog.at_level("WARNING", logger="agentinstall"):
        assert asset.load(_fetcher(MANIFEST)) is True
    assert asset.config.spec.networking.network_type == "OVNKubernetes"
    assert (
        "NetworkType is not specified in AgentClusterInstall. Defaulting NetworkType to OVNKubernetes."
        in caplog.messages
    )


def test_load_unknown_field_strict_vs_lenient():
    text = MANIFEST.replace("  sshPublicKey: ssh-rsa AAAA\n", "  sshPublicKey: ssh-rsa AAAA\n  bogusField: 1\n")
    text = text.replace("    workerAgents: 0\n", "    workerAgents: 0\n    extraCount: 2\n")

    asset = AgentClusterInstallAsset()
    with pytest.raises(ManifestLoadError, match="failed to unmarshal cluster-manifests/agent-cluster-install.yaml") as exc:
        asset.load(_fetcher(text))
    assert exc.value.filename == AGENT_CLUSTER_INSTALL_FILENAME
    assert asset.config is None

    assert asset.load(_fetcher(text), strict=False) is True
    assert asset.config.spec.provision_requirements.control_plane_agents == 1
    assert "bogusField" not in asset.config.to_dict()["spec"]


def test_load_corrupt_yaml():
    with pytest.raises(ManifestLoadError):
        AgentClusterInstallAsset().load(_fetcher("spec: [unclosed\n"))


def test_load_runs_validation_and_adopts_nothing_on_failure():
    text = MANIFEST.replace("    - cidr: 10.128.0.0/14", "    - cidr: fd01::/48").replace(
        "  networking:\n", "  networking:\n    networkType: OpenShiftSDN\n"
    )
    asset = AgentClusterInstallAsset()
    with pytest.raises(ManifestValidationError) as exc:
        asset.load(_fetcher(text))
    assert [e.field for e in exc.value.errors] == ["spec.networking.networkType"]
    assert asset.config is None
    assert asset.files() == []


def test_from_yaml_accepts_empty_document():
    aci = AgentClusterInstall.from_yaml(b"")
    assert aci.kind == "AgentClusterInstall"
    assert aci.spec.networking.cluster_network == []


@pytest.mark.parametrize(
    "old,new",
    [
        ("    hostPrefix: 23\n", '    hostPrefix: "23"\n'),
        ("    controlPlaneAgents: 1\n", '    controlPlaneAgents: "1"\n'),
        ("    workerAgents: 0\n", "    workerAgents: 0.5\n"),
    ],
)
@pytest.mark.parametrize("strict", [True, False])
def test_load_rejects_quoted_numbers(old, new, strict):
    assert old in MANIFEST
    with pytest.raises(ManifestLoadError, match="failed to unmarshal"):
        AgentClusterInstallAsset().load(_fetcher(MANIFEST.replace(old, new)), strict=strict)
