# Unlinkable single-use tokens from blind signatures.
#
# An issuer hands out tokens to users it has authenticated, without learning
# the token serials. Later a verifier accepts each token once, and the issuer
# cannot tell which user spent which token.

from os import urandom

from ecblind.keypair import BlindKeypair
from ecblind.session import BlindSession
from ecblind.request import BlindRequest
from ecblind.wire import encode_signature, decode_signature
from ecblind.errors import BlindSignatureError


class Issuer(object):
    def __init__(self):
        self.keypair = BlindKeypair.generate()
        self.sessions = {}

    def open(self, user):
        rp, session = BlindSession.new()
        self.sessions[user] = session
        return rp

    def answer(self, user, ep):
        session = self.sessions.pop(user)
        return session.sign(ep, self.keypair.private())


class User(object):
    def __init__(self, name, issuer_pub):
        self.name = name
        self.issuer_pub = issuer_pub
        self.pending = None
        self.tokens = []

    def challenge(self, rp):
        serial = urandom(16)
        ep, self.pending = BlindRequest.new_for_message(rp, self.issuer_pub, serial)
        return ep

    def finish(self, sp):
        request, self.pending = self.pending, None
        sig = request.finalize(sp)
        self.tokens.append((request.message(), encode_signature(sig)))


class Verifier(object):
    def __init__(self, issuer_pub):
        self.issuer_pub = issuer_pub
        self.spent = set()

    def redeem(self, serial, wired):
        try:
            sig = decode_signature(wired)
        except (BlindSignatureError, ValueError):
            return False

        if serial in self.spent:
            return False
        if not sig.message_const_authenticate(self.issuer_pub, serial):
            return False

        self.spent.add(serial)
        return True


def issue(issuer, user):
    rp = issuer.open(user.name)
    ep = user.challenge(rp)
    sp = issuer.answer(user.name, ep)
    user.finish(sp)


def test_tokens():
    issuer = Issuer()
    pub = issuer.keypair.public()
    alice, bob = User("alice", pub), User("bob", pub)

    for _ in range(3):
        issue(issuer, alice)
        issue(issuer, bob)

    verifier = Verifier(pub)
    for serial, wired in alice.tokens + bob.tokens:
        assert verifier.redeem(serial, wired)

    # Double spending and forged serials are refused.
    serial, wired = alice.tokens[0]
    assert not verifier.redeem(serial, wired)
    assert not verifier.redeem(urandom(16), bob.tokens[1][1])
    assert not verifier.redeem(serial, b"\xff" * 96)


def test_other_issuer_rejected():
    issuer, rogue = Issuer(), Issuer()
    user = User("carol", rogue.keypair.public())
    issue(rogue, user)

    verifier = Verifier(issuer.keypair.public())
    serial, wired = user.tokens[0]
    assert not verifier.redeem(serial, wired)


if __name__ == "__main__":
    test_tokens()
    test_other_issuer_rejected()
    print("All tokens behaved.")
