"""
Conversion between system documents and pandapower networks.

Power set points and branch impedances in a document are per unit on the
system base power; pandapower works in MW, Mvar and ohms. Branch impedances
are converted on the base voltage of the from-bus and lines are emitted with
a length of 1 km.
"""

import logging
import math
from typing import Any, Dict, Optional

import pandapower as pp

from ..core.interfaces import TopologyExporter, TopologyImporter
from ..core.models import Bus, BusType, Generator, Line, PowerLoad, Source, Transformer2W
from ..registry.system import SystemDocument

logger = logging.getLogger(__name__)

# Used for max_i_ka when a branch has no rating
UNRATED_MAX_I_KA = 99999.0


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _value(row, key: str, default: float) -> float:
    value = row.get(key) if key in row else None
    return default if _is_missing(value) else float(value)


def _element_name(row, prefix: str, idx, taken=()) -> str:
    """
    Component name for a pandapower element.

    Unnamed elements and names already in ``taken`` fall back to
    ``{prefix}{idx}``, suffixed with a counter if that is taken too.
    """
    fallback = f"{prefix}{idx}"
    name = row.get("name") if "name" in row else None
    if _is_missing(name) or not str(name).strip():
        name = fallback
    name = str(name)
    if name in taken:
        logger.warning(f"Duplicate pandapower name '{name}' on {prefix} {idx}, renamed")
        name = fallback
    candidate, counter = name, 1
    while candidate in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    return candidate


class PandapowerConverter(TopologyExporter):
    """
    Converts the static topology of a SystemDocument to a pandapower network.

    The converter works on a snapshot taken at construction, so the document
    may keep changing while the network is built.
    """

    def __init__(self, document: SystemDocument):
        self.document = document.snapshot()
        self.net = pp.create_empty_network(
            name=self.document.name or "ConvertedNet",
            f_hz=self.document.base_frequency,
            sn_mva=self.document.base_power,
        )
        self.bus_to_pp_idx: Dict[str, int] = {}
        self.created_elements_count: Dict[str, int] = {}

    def _count(self, element: str) -> None:
        self.created_elements_count[element] = self.created_elements_count.get(element, 0) + 1

    def _z_base(self, bus_name: str) -> float:
        bus = self.document.get_component(Bus, bus_name)
        return bus.base_voltage ** 2 / self.document.base_power

    def _create_buses(self) -> None:
        logger.info("--- Creating Pandapower Buses ---")
        for bus in self.document.get_components(Bus):
            idx = pp.create_bus(self.net, vn_kv=bus.base_voltage, name=bus.name, in_service=bus.available)
            self.bus_to_pp_idx[bus.name] = idx
            self._count('bus')
            logger.debug(f"Created BUS '{bus.name}' (vn_kv={bus.base_voltage}) -> pp_idx:{idx}")

    def _create_lines(self) -> None:
        logger.info("--- Creating Pandapower Lines ---")
        omega = 2 * math.pi * self.document.base_frequency
        for line in self.document.get_components(Line):
            z_base = self._z_base(line.from_bus)
            vn_kv = self.document.get_component(Bus, line.from_bus).base_voltage
            if line.rating > 0:
                max_i_ka = line.rating * self.document.base_power / (math.sqrt(3) * vn_kv)
            else:
                max_i_ka = UNRATED_MAX_I_KA
            pp.create_line_from_parameters(
                self.net,
                from_bus=self.bus_to_pp_idx[line.from_bus],
                to_bus=self.bus_to_pp_idx[line.to_bus],
                length_km=1.0,
                r_ohm_per_km=line.r * z_base,
                x_ohm_per_km=line.x * z_base,
                c_nf_per_km=line.b / z_base / omega * 1e9,
                max_i_ka=max_i_ka,
                name=line.name,
                in_service=line.available,
            )
            self._count('line')
            logger.debug(f"Created LINE '{line.name}' {line.from_bus} -> {line.to_bus}")

    def _create_transformers(self) -> None:
        logger.info("--- Creating Pandapower Transformers ---")
        base = self.document.base_power
        for trafo in self.document.get_components(Transformer2W):
            sn_mva = trafo.rating * base if trafo.rating > 0 else base
            scale = 100.0 * sn_mva / base
            hv = self.document.get_component(Bus, trafo.from_bus)
            lv = self.document.get_component(Bus, trafo.to_bus)
            pp.create_transformer_from_parameters(
                self.net,
                hv_bus=self.bus_to_pp_idx[hv.name],
                lv_bus=self.bus_to_pp_idx[lv.name],
                sn_mva=sn_mva,
                vn_hv_kv=hv.base_voltage * trafo.tap,
                vn_lv_kv=lv.base_voltage,
                vk_percent=math.hypot(trafo.r, trafo.x) * scale,
                vkr_percent=trafo.r * scale,
                pfe_kw=0.0,
                i0_percent=abs(trafo.primary_shunt) * 100.0 * base / sn_mva,
                name=trafo.name,
                in_service=trafo.available,
            )
            self._count('trafo')

    def _create_ext_grids(self) -> None:
        logger.info("--- Creating Pandapower External Grids ---")
        for source in self.document.get_components(Source):
            pp.create_ext_grid(
                self.net,
                self.bus_to_pp_idx[source.bus],
                vm_pu=source.internal_voltage,
                va_degree=math.degrees(source.internal_angle),
                name=source.name,
                in_service=source.available,
            )
            self._count('ext_grid')

    def _create_gens(self) -> None:
        logger.info("--- Creating Pandapower Generators ---")
        base = self.document.base_power
        source_buses = {s.bus for s in self.document.get_components(Source, lambda s: s.available)}
        for gen in self.document.get_components(Generator):
            bus = self.document.get_component(Bus, gen.bus)
            # A generator is the slack only where no external grid holds the reference
            is_slack = bus.bus_type is BusType.REF and bus.name not in source_buses
            pp.create_gen(
                self.net,
                self.bus_to_pp_idx[gen.bus],
                p_mw=gen.active_power * base,
                vm_pu=bus.magnitude,
                sn_mva=gen.base_power,
                min_p_mw=gen.active_power_min * base,
                max_p_mw=gen.active_power_max * base,
                min_q_mvar=gen.reactive_power_min * base,
                max_q_mvar=gen.reactive_power_max * base,
                slack=is_slack,
                name=gen.name,
                in_service=gen.available,
            )
            self._count('gen')

    def _create_loads(self) -> None:
        logger.info("--- Creating Pandapower Loads ---")
        base = self.document.base_power
        for load in self.document.get_components(PowerLoad):
            pp.create_load(
                self.net,
                self.bus_to_pp_idx[load.bus],
                p_mw=load.active_power * base,
                q_mvar=load.reactive_power * base,
                name=load.name,
                in_service=load.available,
            )
            self._count('load')

    def convert(self):
        """
        Build the pandapower network.

        Returns:
            The pandapowerNet holding buses, lines, transformers, external
            grids, generators and loads
        """
        self._create_buses()
        self._create_lines()
        self._create_transformers()
        self._create_ext_grids()
        self._create_gens()
        self._create_loads()

        logger.info(f"Pandapower conversion finished: {self.created_elements_count}")
        return self.net


class PandapowerImporter(TopologyImporter):
    """
    Builds a SystemDocument from a pandapower network.

    Every component is added through the registry, so the result satisfies
    the same checks as hand-built documents. Buses carrying an external grid
    become REF buses, buses with a generator PV, the rest PQ.
    """

    def __init__(self, base_frequency: Optional[float] = None):
        self.base_frequency = base_frequency

    def build_document(self, source) -> SystemDocument:
        net = source
        base = float(net.sn_mva)
        f_hz = self.base_frequency if self.base_frequency is not None else float(net.f_hz)
        document = SystemDocument(base_power=base, base_frequency=f_hz, name=net.name or None)

        bus_names = self._add_buses(document, net)
        self._add_lines(document, net, bus_names)
        self._add_transformers(document, net, bus_names)
        self._add_injections(document, net, bus_names)

        logger.info(f"Imported {len(document)} components from pandapower network '{net.name}'")
        return document

    def _add_buses(self, document: SystemDocument, net) -> Dict[int, str]:
        ref_buses = {int(b) for b in net.ext_grid.bus}
        pv_buses = {int(b) for b in net.gen.bus}
        set_points = {int(r.bus): _value(r, "vm_pu", 1.0) for _, r in net.gen.iterrows()}
        set_points.update({int(r.bus): _value(r, "vm_pu", 1.0) for _, r in net.ext_grid.iterrows()})

        names = {}
        for idx, row in net.bus.iterrows():
            idx = int(idx)
            if idx in ref_buses:
                bus_type = BusType.REF
            elif idx in pv_buses:
                bus_type = BusType.PV
            else:
                bus_type = BusType.PQ
            bus = Bus(
                name=_element_name(row, "bus", idx, document),
                available=bool(row["in_service"]),
                number=idx + 1,
                bus_type=bus_type,
                magnitude=set_points.get(idx, 1.0),
                base_voltage=float(row["vn_kv"]),
            )
            document.add_component(bus)
            names[idx] = bus.name
        return names

    def _add_lines(self, document: SystemDocument, net, bus_names: Dict[int, str]) -> None:
        omega = 2 * math.pi * document.base_frequency
        for idx, row in net.line.iterrows():
            vn_kv = float(net.bus.at[row["from_bus"], "vn_kv"])
            z_base = vn_kv ** 2 / document.base_power
            length = float(row["length_km"])
            max_i_ka = _value(row, "max_i_ka", 0.0)
            rating = 0.0 if max_i_ka >= UNRATED_MAX_I_KA else max_i_ka * math.sqrt(3) * vn_kv / document.base_power
            document.add_component(Line(
                name=_element_name(row, "line", idx, document),
                available=bool(row["in_service"]),
                from_bus=bus_names[int(row["from_bus"])],
                to_bus=bus_names[int(row["to_bus"])],
                r=float(row["r_ohm_per_km"]) * length / z_base,
                x=float(row["x_ohm_per_km"]) * length / z_base,
                b=omega * _value(row, "c_nf_per_km", 0.0) * 1e-9 * length * z_base,
                rating=rating,
            ))

    def _add_transformers(self, document: SystemDocument, net, bus_names: Dict[int, str]) -> None:
        base = document.base_power
        for idx, row in net.trafo.iterrows():
            sn_mva = float(row["sn_mva"])
            scale = 100.0 * sn_mva / base
            vk = float(row["vk_percent"])
            vkr = float(row["vkr_percent"])
            hv_kv = float(net.bus.at[row["hv_bus"], "vn_kv"])
            document.add_component(Transformer2W(
                name=_element_name(row, "trafo", idx, document),
                available=bool(row["in_service"]),
                from_bus=bus_names[int(row["hv_bus"])],
                to_bus=bus_names[int(row["lv_bus"])],
                r=vkr / scale,
                x=math.sqrt(max(vk ** 2 - vkr ** 2, 0.0)) / scale,
                rating=sn_mva / base,
                primary_shunt=_value(row, "i0_percent", 0.0) / 100.0 * sn_mva / base,
                tap=float(row["vn_hv_kv"]) / hv_kv,
            ))

    def _add_injections(self, document: SystemDocument, net, bus_names: Dict[int, str]) -> None:
        base = document.base_power
        for idx, row in net.ext_grid.iterrows():
            document.add_component(Source(
                name=_element_name(row, "ext_grid", idx, document),
                available=bool(row["in_service"]),
                bus=bus_names[int(row["bus"])],
                internal_voltage=_value(row, "vm_pu", 1.0),
                internal_angle=math.radians(_value(row, "va_degree", 0.0)),
                base_power=base,
            ))

        for idx, row in net.gen.iterrows():
            p = _value(row, "p_mw", 0.0) / base
            document.add_component(Generator(
                name=_element_name(row, "gen", idx, document),
                available=bool(row["in_service"]),
                bus=bus_names[int(row["bus"])],
                active_power=p,
                base_power=_value(row, "sn_mva", base),
                active_power_min=_value(row, "min_p_mw", min(p, 0.0) * base) / base,
                active_power_max=_value(row, "max_p_mw", max(p, 0.0) * base) / base,
                reactive_power_min=_value(row, "min_q_mvar", 0.0) / base,
                reactive_power_max=_value(row, "max_q_mvar", 0.0) / base,
            ))

        for idx, row in net.load.iterrows():
            p = _value(row, "p_mw", 0.0) / base
            q = _value(row, "q_mvar", 0.0) / base
            document.add_component(PowerLoad(
                name=_element_name(row, "load", idx, document),
                available=bool(row["in_service"]),
                bus=bus_names[int(row["bus"])],
                active_power=p,
                reactive_power=q,
                max_active_power=p,
                max_reactive_power=q,
            ))


def from_pandapower(net, base_frequency: Optional[float] = None) -> SystemDocument:
    """Build a SystemDocument holding the static topology of ``net``."""
    return PandapowerImporter(base_frequency).build_document(net)
