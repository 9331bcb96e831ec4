from django.conf import settings

from payments.checksum import sign

MID = settings.PAYTM["MID"]
KEY = settings.PAYTM["MERCHANT_KEY"]


class FakeResponse:
    def __init__(self, data=None, status_code=200, text=""):
        self._data = data
        self.status_code = status_code
        self.text = text

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data


def token_response(token="TXNTOKEN123"):
    return FakeResponse(
        {
            "head": {"responseTimestamp": "1718000000000", "version": "v1"},
            "body": {
                "resultInfo": {"resultStatus": "S", "resultCode": "0000", "resultMsg": "Success"},
                "txnToken": token,
                "isPromoCodeValid": False,
                "authenticated": False,
            },
        }
    )


def callback_fields(order_id, status="TXN_SUCCESS", amount="499.00", **extra):
    fields = {
        "ORDERID": order_id,
        "MID": MID,
        "TXNID": "20240601111212800110168",
        "BANKTXNID": "777001",
        "TXNAMOUNT": amount,
        "CURRENCY": "INR",
        "STATUS": status,
        "RESPCODE": "01" if status == "TXN_SUCCESS" else "227",
        "RESPMSG": "Txn Success" if status == "TXN_SUCCESS" else "Txn failed",
        "GATEWAYNAME": "HDFC",
        "PAYMENTMODE": "UPI",
    }
    fields.update(extra)
    return fields


def flat_callback(order_id, key=KEY, **kwargs):
    fields = callback_fields(order_id, **kwargs)
    return {**fields, "CHECKSUMHASH": sign(fields, key)}
