"""Group parameters for the Chaum-Pedersen protocol.

A Chaum-Pedersen setting is a prime modulus ``p``, a prime ``q`` dividing
``p - 1``, and two generators ``alpha`` and ``beta`` of the order-``q``
subgroup of Zp*. The prover shows that ``y1 = alpha^x`` and ``y2 = beta^x``
share the same exponent ``x``. Nobody may know ``log_alpha(beta)``, so the
named integer groups derive ``beta`` by hashing a public seed into the
subgroup.

Scalars (secrets, nonces, challenges, responses) live in [0, q) and travel as
big-endian strings as wide as ``q``. Elements (public values, commitments)
live in [0, p) and travel as big-endian strings as wide as ``p``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict

from .errors import MalformedValue, ParameterError
from .numbers import bytes_to_number, number_to_bytes, size_bytes


@dataclass(frozen=True)
class GroupParameters:
    """Immutable description of the cyclic group shared by client and server."""

    p: int
    q: int
    alpha: int
    beta: int
    name: str = field(default="custom", compare=False)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        p, q = self.p, self.q
        if p <= 3 or q <= 1:
            raise ParameterError("Modulus and order must be greater than one")
        if (p - 1) % q != 0:
            raise ParameterError("Subgroup order must divide p - 1")
        for label, generator in (("alpha", self.alpha), ("beta", self.beta)):
            if not 1 < generator < p:
                raise ParameterError(f"Generator {label} must lie in (1, p)")
            if pow(generator, q, p) != 1:
                raise ParameterError(f"Generator {label} does not have order q")
        if self.alpha == self.beta:
            raise ParameterError("The two generators must differ")

    @property
    def element_size_bytes(self) -> int:
        return size_bytes(self.p)

    @property
    def scalar_size_bytes(self) -> int:
        return size_bytes(self.q)

    def fingerprint(self) -> str:
        """Digest identifying the parameters, compared before any exchange."""

        hasher = hashlib.sha256(b"cpauth-group-v1")
        hasher.update(number_to_bytes(self.p, self.p))
        hasher.update(number_to_bytes(self.q, self.q))
        hasher.update(number_to_bytes(self.alpha, self.p))
        hasher.update(number_to_bytes(self.beta, self.p))
        return hasher.hexdigest()

    def is_member(self, element: int) -> bool:
        if not 0 < element < self.p:
            return False
        return pow(element, self.q, self.p) == 1

    def element_to_bytes(self, element: int) -> bytes:
        return number_to_bytes(element, self.p - 1)

    def scalar_to_bytes(self, scalar: int) -> bytes:
        return number_to_bytes(scalar, self.q - 1)

    def bytes_to_element(self, data: bytes, *, check_member: bool = False) -> int:
        _check_width(data, self.element_size_bytes, "element")
        value = bytes_to_number(data)
        if value >= self.p:
            raise MalformedValue("Element outside of [0, p)")
        if check_member and not self.is_member(value):
            raise MalformedValue("Element is not in the order-q subgroup")
        return value

    def bytes_to_scalar(self, data: bytes) -> int:
        _check_width(data, self.scalar_size_bytes, "scalar")
        value = bytes_to_number(data)
        if value >= self.q:
            raise MalformedValue("Scalar outside of [0, q)")
        return value

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "p": hex(self.p),
            "q": hex(self.q),
            "alpha": hex(self.alpha),
            "beta": hex(self.beta),
            "fingerprint": self.fingerprint(),
        }


def _check_width(data: bytes, width: int, label: str) -> None:
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedValue(f"Encoded {label} must be bytes")
    if len(data) != width:
        raise MalformedValue(f"Encoded {label} must be exactly {width} bytes")


def derive_generator(p: int, q: int, seed: bytes) -> int:
    """Hash ``seed`` to an element of the order-``q`` subgroup of Zp*.

    Zp* has order p - 1 = r * q, so raising any element to the r-th power
    lands in the subgroup. Starting from a hash output means nobody knows the
    discrete log of the result relative to any other generator.
    """

    r = (p - 1) // q
    if r * q != p - 1:
        raise ParameterError("Subgroup order must divide p - 1")
    counter = 0
    while True:
        material = b"cpauth generator|" + seed + b"|" + str(counter).encode("ascii")
        stream = hashlib.shake_256(material).digest(size_bytes(p) + 16)
        h = bytes_to_number(stream) % p
        candidate = pow(h, r, p)
        if candidate > 1:
            return candidate
        counter += 1


def _integer_group(name: str, p: int, q: int, alpha: int) -> GroupParameters:
    beta = derive_generator(p, q, name.encode("ascii") + b" beta")
    return GroupParameters(p=p, q=q, alpha=alpha, beta=beta, name=name)


# These moduli, orders and first generators are the L=1024/2048/3072 DSA
# domain parameters from the NIST examples (via the J-PAKE demo code).

# L=1024, N=160
I1024 = _integer_group(
    "i1024",
    p=0xE0A67598CD1B763BC98C8ABB333E5DDA0CD3AA0E5E1FB5BA8A7B4EABC10BA338FAE06DD4B90FDA70D7CF0CB0C638BE3341BEC0AF8A7330A3307DED2299A0EE606DF035177A239C34A912C202AA5F83B9C4A7CF0235B5316BFC6EFB9A248411258B30B839AF172440F32563056CB67A861158DDD90E6A894C72A5BBEF9E286C6B,
    q=0xE950511EAB424B9A19A2AEB4E159B7844C589C4F,
    alpha=0xD29D5121B0423C2769AB21843E5A3240FF19CACC792264E3BB6BE4F78EDD1B15C4DFF7F1D905431F0AB16790E1F773B5CE01C804E509066A9919F5195F4ABC58189FD9FF987389CB5BEDF21B4DAB4F8B76A055FFE2770988FE2EC2DE11AD92219F0B351869AC24DA3D7BA87011A701CE8EE7BFE49486ED4527B7186CA4610A75,
)

# L=2048, N=224
I2048 = _integer_group(
    "i2048",
    p=0xC196BA05AC29E1F9C3C72D56DFFC6154A033F1477AC88EC37F09BE6C5BB95F51C296DD20D1A28A067CCC4D4316A4BD1DCA55ED1066D438C35AEBAABF57E7DAE428782A95ECA1C143DB701FD48533A3C18F0FE23557EA7AE619ECACC7E0B51652A8776D02A425567DED36EABD90CA33A1E8D988F0BBB92D02D1D20290113BB562CE1FC856EEB7CDD92D33EEA6F410859B179E7E789A8F75F645FAE2E136D252BFFAFF89528945C1ABE705A38DBC2D364AADE99BE0D0AAD82E5320121496DC65B3930E38047294FF877831A16D5228418DE8AB275D7D75651CEFED65F78AFC3EA7FE4D79B35F62A0402A1117599ADAC7B269A59F353CF450E6982D3B1702D9CA83,
    q=0x90EAF4D1AF0708B1B612FF35E0A2997EB9E9D263C9CE659528945C0D,
    alpha=0xA59A749A11242C58C894E9E5A91804E8FA0AC64B56288F8D47D51B1EDC4D65444FECA0111D78F35FC9FDD4CB1F1B79A3BA9CBEE83A3F811012503C8117F98E5048B089E387AF6949BF8784EBD9EF45876F2E6A5A495BE64B6E770409494B7FEE1DBB1E4B2BC2A53D4F893D418B7159592E4FFFDF6969E91D770DAEBD0B5CB14C00AD68EC7DC1E5745EA55C706C4A1C5C88964E34D09DEB753AD418C1AD0F4FDFD049A955E5D78491C0B7A2F1575A008CCD727AB376DB6E695515B05BD412F5B8C2F4C77EE10DA48ABD53F5DD498927EE7B692BBBCDA2FB23A516C5B4533D73980B2A3B60E384ED200AE21B40D273651AD6060C13D97FD69AA13C5611A51B9085,
)

# L=3072, N=256
I3072 = _integer_group(
    "i3072",
    p=0x90066455B5CFC38F9CAA4A48B4281F292C260FEEF01FD61037E56258A7795A1C7AD46076982CE6BB956936C6AB4DCFE05E6784586940CA544B9B2140E1EB523F009D20A7E7880E4E5BFA690F1B9004A27811CD9904AF70420EEFD6EA11EF7DA129F58835FF56B89FAA637BC9AC2EFAAB903402229F491D8D3485261CD068699B6BA58A1DDBBEF6DB51E8FE34E8A78E542D7BA351C21EA8D8F1D29F5D5D15939487E27F4416B0CA632C59EFD1B1EB66511A5A0FBF615B766C5862D0BD8A3FE7A0E0DA0FB2FE1FCB19E8F9996A8EA0FCCDE538175238FC8B0EE6F29AF7F642773EBE8CD5402415A01451A840476B2FCEB0E388D30D4B376C37FE401C2A2C2F941DAD179C540C1C8CE030D460C4D983BE9AB0B20F69144C1AE13F9383EA1C08504FB0BF321503EFE43488310DD8DC77EC5B8349B8BFE97C2C560EA878DE87C11E3D597F1FEA742D73EEC7F37BE43949EF1A0D15C3F3E3FC0A8335617055AC91328EC22B50FC15B941D3D1624CD88BC25F3E941FDDC6200689581BFEC416B4B2CB73,
    q=0xCFA0478A54717B08CE64805B76E5B14249A77A4838469DF7F7DC987EFCCFB11D,
    alpha=0x5E5CBA992E0A680D885EB903AEA78E4A45A469103D448EDE3B7ACCC54D521E37F84A4BDD5B06B0970CC2D2BBB715F7B82846F9A0C393914C792E6A923E2117AB805276A975AADB5261D91673EA9AAFFEECBFA6183DFCB5D3B7332AA19275AFA1F8EC0B60FB6F66CC23AE4870791D5982AAD1AA9485FD8F4A60126FEB2CF05DB8A7F0F09B3397F3937F2E90B9E5B9C9B6EFEF642BC48351C46FB171B9BFA9EF17A961CE96C7E7A7CC3D3D03DFAD1078BA21DA425198F07D2481622BCE45969D9C4D6063D72AB7A0F08B2F49A7CC6AF335E08C4720E31476B67299E231F8BD90B39AC3AE3BE0C6B6CACEF8289A2E2873D58E51E029CAFBD55E6841489AB66B5B4B9BA6E2F784660896AFF387D92844CCB8B69475496DE19DA2E58259B090489AC8E62363CDF82CFD8EF2A427ABCD65750B506F56DDE3B988567A88126B914D7828E2B63A6D7ED0747EC59E0E0A23CE7D8A74C1D2C2A7AFB6A29799620F00E11C33787F7DED3B30E1A22D09F1FBDA1ABBBFBF25CAE05A13F812E34563F99410E73B,
)

# Small group for readable test vectors. Offers no security at all.
TOY = GroupParameters(p=23, q=11, alpha=4, beta=9, name="toy")

GROUPS: Dict[str, GroupParameters] = {
    group.name: group for group in (I1024, I2048, I3072, TOY)
}

DEFAULT_GROUP = I1024


def get_group(name: str) -> GroupParameters:
    try:
        return GROUPS[name.lower()]
    except KeyError:
        raise ParameterError(
            f"Unknown group {name!r}; choose one of {', '.join(sorted(GROUPS))}"
        ) from None


__all__ = [
    "GroupParameters",
    "derive_generator",
    "get_group",
    "GROUPS",
    "DEFAULT_GROUP",
    "I1024",
    "I2048",
    "I3072",
    "TOY",
]
